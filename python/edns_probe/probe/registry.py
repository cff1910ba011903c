from __future__ import annotations

from typing import Iterable, Optional, Tuple

import dns.rcode
import dns.rdatatype

from .model import (
    CookieOptionSpec,
    DoBitRule,
    EdnsPresence,
    EdnsSpec,
    ExpectedOutcome,
    MustBeAbsent,
    MustBeEmpty,
    MustBePresentAndPrefixMatch,
    MustContainOnlyType,
    MustContainTypesSubsetOf,
    QuerySpec,
    TestCase,
    UnknownOptionSpec,
)
from .validator import NO_EXTENDED_RCODE

# unassigned EDNS option code and EDNS version used for the negative cases
UNKNOWN_OPTION_CODE = 100
UNKNOWN_VERSION = 100
# a reserved bit in the OPT flags field (dig +ednsflags=0x80)
UNKNOWN_FLAG = 0x0080
TRUNCATION_PAYLOAD = 512
COOKIE_OPTION_CODE = 10

SOA = dns.rdatatype.SOA
DNSKEY = dns.rdatatype.DNSKEY
RRSIG = dns.rdatatype.RRSIG

CASES: Tuple[TestCase, ...] = (
    TestCase(
        name="NoEDNS",
        rationale="Plain DNS query (dig +norec +noedns soa zone). "
        "A plain query is answered with the SOA record, OPT in the response is not judged.",
        query=QuerySpec(SOA),
        expected=ExpectedOutcome(
            rcode=dns.rcode.NOERROR,
            answer=MustContainOnlyType(SOA),
            edns=None,
        ),
    ),
    TestCase(
        name="PlainEDNS",
        rationale="EDNS version 0 query (dig +norec +edns=0 soa zone). "
        "RFC 6891: the response carries OPT with version 0.",
        query=QuerySpec(SOA, edns=EdnsSpec()),
        expected=ExpectedOutcome(
            rcode=dns.rcode.NOERROR,
            answer=MustContainOnlyType(SOA),
            edns=EdnsPresence.REQUIRED,
            edns_version=0,
            extended_rcode=NO_EXTENDED_RCODE,
        ),
    ),
    TestCase(
        name="UnknownVersion",
        rationale="EDNS version 100 without version negotiation (dig +norec +edns=100 +noednsneg soa zone). "
        "RFC 6891 section 6.1.3: BADVERS, OPT with the highest version supported (0), no answer.",
        query=QuerySpec(SOA, edns=EdnsSpec(version=UNKNOWN_VERSION)),
        expected=ExpectedOutcome(
            rcode=dns.rcode.NOERROR,
            answer=MustBeEmpty(),
            edns=EdnsPresence.REQUIRED,
            edns_version=0,
            extended_rcode=dns.rcode.BADVERS,
        ),
    ),
    TestCase(
        name="UnknownOption",
        rationale="Unassigned EDNS option 100 (dig +norec +ednsopt=100 soa zone). "
        "RFC 6891 section 6.1.2: unknown options are ignored and not echoed.",
        query=QuerySpec(SOA, edns=EdnsSpec(options=(UnknownOptionSpec(UNKNOWN_OPTION_CODE),))),
        expected=ExpectedOutcome(
            rcode=dns.rcode.NOERROR,
            answer=MustContainOnlyType(SOA),
            edns=EdnsPresence.REQUIRED,
            edns_version=0,
            extended_rcode=NO_EXTENDED_RCODE,
            option=MustBeAbsent(UNKNOWN_OPTION_CODE),
        ),
    ),
    TestCase(
        name="UnknownFlag",
        rationale="Reserved EDNS flag set (dig +norec +ednsflags=0x80 soa zone). "
        "RFC 6891 section 6.1.4: reserved flags are ignored and cleared in the response.",
        query=QuerySpec(SOA, edns=EdnsSpec(extra_flags=UNKNOWN_FLAG)),
        expected=ExpectedOutcome(
            rcode=dns.rcode.NOERROR,
            answer=MustContainOnlyType(SOA),
            edns=EdnsPresence.REQUIRED,
            edns_version=0,
            extended_rcode=NO_EXTENDED_RCODE,
            reserved_flags_clear=True,
        ),
    ),
    TestCase(
        name="DNSSECOk",
        rationale="DO bit set (dig +norec +dnssec soa zone). "
        "RFC 3225: the DO bit is echoed when DNSSEC records are returned, signed zones add RRSIG.",
        query=QuerySpec(SOA, edns=EdnsSpec(do_bit=True)),
        expected=ExpectedOutcome(
            rcode=dns.rcode.NOERROR,
            answer=MustContainTypesSubsetOf(frozenset({SOA, RRSIG}), required=frozenset({SOA})),
            edns=EdnsPresence.REQUIRED,
            edns_version=0,
            extended_rcode=NO_EXTENDED_RCODE,
            do_bit=DoBitRule.MUST_MATCH_ANSWER_HAS_RRSIG,
        ),
    ),
    TestCase(
        name="TruncatedResponse",
        rationale="DNSKEY with DO bit and 512 byte payload (dig +norec +dnssec +bufsize=512 +ignore dnskey zone). "
        "RFC 6891 section 7: a truncated response still carries OPT.",
        query=QuerySpec(DNSKEY, edns=EdnsSpec(payload=TRUNCATION_PAYLOAD, do_bit=True)),
        expected=ExpectedOutcome(
            rcode=dns.rcode.NOERROR,
            answer=MustContainTypesSubsetOf(frozenset({DNSKEY, RRSIG})),
            edns=EdnsPresence.REQUIRED,
            edns_version=0,
            extended_rcode=NO_EXTENDED_RCODE,
            allow_truncation=True,
        ),
    ),
    TestCase(
        name="UnknownVersionWithUnknownOption",
        rationale="EDNS version 100 with option 100 (dig +norec +edns=100 +noednsneg +ednsopt=100 soa zone). "
        "RFC 6891 sections 6.1.2 and 6.1.3: BADVERS, OPT version 0, the option is not echoed.",
        query=QuerySpec(
            SOA,
            edns=EdnsSpec(version=UNKNOWN_VERSION, options=(UnknownOptionSpec(UNKNOWN_OPTION_CODE),)),
        ),
        expected=ExpectedOutcome(
            rcode=dns.rcode.NOERROR,
            answer=MustBeEmpty(),
            edns=EdnsPresence.REQUIRED,
            edns_version=0,
            extended_rcode=dns.rcode.BADVERS,
            option=MustBeAbsent(UNKNOWN_OPTION_CODE),
        ),
    ),
    TestCase(
        name="DNSCookie",
        rationale="Client cookie (dig +norec +cookie soa zone). "
        "RFC 7873 section 5.2: the response cookie starts with the client cookie.",
        query=QuerySpec(SOA, edns=EdnsSpec(options=(CookieOptionSpec(),))),
        expected=ExpectedOutcome(
            rcode=dns.rcode.NOERROR,
            answer=MustContainOnlyType(SOA),
            edns=EdnsPresence.REQUIRED,
            edns_version=0,
            extended_rcode=NO_EXTENDED_RCODE,
            option=MustBePresentAndPrefixMatch(COOKIE_OPTION_CODE),
        ),
    ),
)


def case_names() -> Tuple[str, ...]:
    return tuple(case.name for case in CASES)


def get_cases(names: Optional[Iterable[str]] = None) -> Tuple[TestCase, ...]:
    """Registered cases with the given names, in registration order. All of them when no names are given."""

    if names is None:
        return CASES

    wanted = set(names)
    unknown = wanted.difference(case_names())
    if unknown:
        raise KeyError(f"unknown test case(s): {', '.join(sorted(unknown))}")
    return tuple(case for case in CASES if case.name in wanted)
