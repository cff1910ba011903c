from typing import Optional

import dns.edns
import dns.flags
import dns.message
import dns.rcode
import dns.rdatatype
import dns.rrset
import pytest

from edns_probe.probe.builder import BuiltQuery, build
from edns_probe.probe.model import (
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
    UnknownOptionSpec,
)
from edns_probe.probe.registry import COOKIE_OPTION_CODE, get_cases
from edns_probe.probe.validator import (
    NO_EXTENDED_RCODE,
    ValidationFailure,
    ValidationResult,
    extended_rcode,
    rcode_text,
    validate,
)

ZONE = "example.com."
SOA_TEXT = "ns1.example.com. hostmaster.example.com. 2024010101 7200 3600 1209600 3600"
RRSIG_TEXT = "{} 13 2 3600 20300101000000 20200101000000 12345 example.com. AAAA"
DNSKEY_TEXT = "257 3 13 AAAA"

SOA = dns.rdatatype.SOA
DNSKEY = dns.rdatatype.DNSKEY
RRSIG = dns.rdatatype.RRSIG


def _rrset(rdtype: str, text: str) -> dns.rrset.RRset:
    return dns.rrset.from_text(ZONE, 3600, "IN", rdtype, text)


def _soa() -> dns.rrset.RRset:
    return _rrset("SOA", SOA_TEXT)


def _rrsig(covered: str = "SOA") -> dns.rrset.RRset:
    return _rrset("RRSIG", RRSIG_TEXT.format(covered))


def _query(name: str) -> BuiltQuery:
    (case,) = get_cases([name])
    return build(case.query, ZONE)


def _expected(name: str) -> ExpectedOutcome:
    (case,) = get_cases([name])
    return case.expected


def _response(query: BuiltQuery, *answer: dns.rrset.RRset) -> dns.message.Message:
    response = dns.message.make_response(query.message)
    for rrset in answer:
        response.answer.append(rrset)
    return response


def _check(response: Optional[dns.message.Message], expected: ExpectedOutcome, cookie: Optional[bytes] = None):
    return validate(response, cookie, expected)


def _basic(**kwargs) -> ExpectedOutcome:
    defaults = dict(rcode=dns.rcode.NOERROR, answer=MustContainOnlyType(SOA), edns=EdnsPresence.REQUIRED)
    defaults.update(kwargs)
    return ExpectedOutcome(**defaults)


def _edns_response(*answer: dns.rrset.RRset) -> dns.message.Message:
    return _response(build(QuerySpec(SOA, edns=EdnsSpec()), ZONE), *answer)


# concrete scenarios


def test_no_edns_compliant():
    query = _query("NoEDNS")
    response = _response(query, _soa())

    assert response.opt is None
    assert _check(response, _expected("NoEDNS")) == ValidationResult(True)


def test_no_edns_opt_in_response():
    query = _query("NoEDNS")
    response = _response(query, _soa())
    response.use_edns(0)

    assert _check(response, _expected("NoEDNS")) == ValidationResult(True)


def test_no_edns_opt_version_not_judged():
    query = _query("NoEDNS")
    response = _response(query, _soa())
    response.use_edns(1)

    assert _check(response, _expected("NoEDNS")) == ValidationResult(True)


def test_opt_forbidden():
    response = _response(_query("NoEDNS"), _soa())
    response.use_edns(0)

    assert _check(response, _basic(edns=EdnsPresence.FORBIDDEN)) == ValidationResult(False, "OPT received")
    response.use_edns(False)
    assert _check(response, _basic(edns=EdnsPresence.FORBIDDEN)) == ValidationResult(True)


@pytest.mark.parametrize("name", ["UnknownVersion", "UnknownVersionWithUnknownOption"])
def test_unknown_version_compliant(name: str):
    query = _query(name)
    response = _response(query)
    response.set_rcode(dns.rcode.BADVERS)

    assert response.edns == 0
    assert _check(response, _expected(name)).passed


@pytest.mark.parametrize("name", ["UnknownVersion", "UnknownVersionWithUnknownOption"])
def test_unknown_version_with_answer(name: str):
    query = _query(name)
    response = _response(query, _soa())
    response.set_rcode(dns.rcode.BADVERS)

    assert _check(response, _expected(name)) == ValidationResult(False, "unexpected answer")


def test_unknown_version_echoed_version():
    query = _query("UnknownVersion")
    response = _response(query)
    response.use_edns(100)
    response.set_rcode(dns.rcode.BADVERS)

    assert _check(response, _expected("UnknownVersion")) == ValidationResult(False, "EDNS0 Version 100 received")


def test_unknown_version_without_badvers():
    query = _query("UnknownVersion")
    response = _response(query)

    result = _check(response, _expected("UnknownVersion"))
    assert result == ValidationResult(False, f"extended rcode {NO_EXTENDED_RCODE} NONE")


def test_unknown_option_compliant():
    query = _query("UnknownOption")
    response = _response(query, _soa())

    assert _check(response, _expected("UnknownOption")).passed


def test_unknown_option_echoed():
    query = _query("UnknownOption")
    response = _response(query, _soa())
    response.use_edns(0, options=[dns.edns.GenericOption(100, b"")])

    result = _check(response, _expected("UnknownOption"))
    assert not result.passed
    assert result.reason is not None
    assert result.reason.startswith("option data received")


def test_unknown_version_with_unknown_option_echoed():
    query = _query("UnknownVersionWithUnknownOption")
    response = _response(query)
    response.use_edns(0, options=[dns.edns.GenericOption(100, b"")])
    response.set_rcode(dns.rcode.BADVERS)

    result = _check(response, _expected("UnknownVersionWithUnknownOption"))
    assert result == ValidationResult(False, "option data received (option 100)")


def test_truncated_response_compliant():
    query = _query("TruncatedResponse")
    response = _response(query)
    response.flags |= dns.flags.TC

    assert _check(response, _expected("TruncatedResponse")).passed


def test_truncated_response_with_partial_answer():
    query = _query("TruncatedResponse")
    response = _response(query, _rrset("DNSKEY", DNSKEY_TEXT), _rrsig("DNSKEY"))
    response.flags |= dns.flags.TC

    assert _check(response, _expected("TruncatedResponse")).passed


def test_truncated_response_without_opt():
    query = _query("TruncatedResponse")
    response = dns.message.make_response(query.message)
    response.use_edns(False)
    response.flags |= dns.flags.TC

    assert _check(response, _expected("TruncatedResponse")) == ValidationResult(False, "No OPT received")


# answer rules


@pytest.mark.parametrize(
    "answer,reason",
    [
        ((), "no SOA in answer"),
        ((_soa(),), None),
        ((_soa(), _rrsig()), "unexpected answer RRSIG"),
        ((_rrset("DNSKEY", DNSKEY_TEXT),), "unexpected answer DNSKEY"),
    ],
)
def test_must_contain_only_type(answer, reason: Optional[str]):
    result = _check(_edns_response(*answer), _basic())
    assert result == ValidationResult(reason is None, reason)


@pytest.mark.parametrize(
    "answer,reason",
    [
        ((), None),
        ((_soa(),), "unexpected answer"),
    ],
)
def test_must_be_empty(answer, reason: Optional[str]):
    result = _check(_edns_response(*answer), _basic(answer=MustBeEmpty()))
    assert result == ValidationResult(reason is None, reason)


@pytest.mark.parametrize(
    "answer,reason",
    [
        ((), "no SOA in answer"),
        ((_soa(),), None),
        ((_soa(), _rrsig()), None),
        ((_rrsig(),), "no SOA in answer"),
        ((_soa(), _rrset("DNSKEY", DNSKEY_TEXT)), "unexpected answer DNSKEY"),
    ],
)
def test_must_contain_types_subset_of(answer, reason: Optional[str]):
    rule = MustContainTypesSubsetOf(frozenset({SOA, RRSIG}), required=frozenset({SOA}))
    result = _check(_edns_response(*answer), _basic(answer=rule))
    assert result == ValidationResult(reason is None, reason)


# header and OPT checks


def test_rcode_checked_first():
    response = _edns_response()
    response.set_rcode(dns.rcode.REFUSED)
    response.use_edns(False)

    assert _check(response, _basic()) == ValidationResult(False, "rcode REFUSED")


@pytest.mark.parametrize("rcode", [dns.rcode.NOERROR, dns.rcode.SERVFAIL])
def test_opt_required_independent_of_rcode(rcode: dns.rcode.Rcode):
    response = _edns_response(_soa())
    response.use_edns(False)
    response.set_rcode(rcode)

    assert _check(response, _basic(rcode=rcode)) == ValidationResult(False, "No OPT received")


def test_edns_version_mismatch():
    response = _edns_response(_soa())
    response.use_edns(1)

    assert _check(response, _basic(edns_version=0)) == ValidationResult(False, "EDNS0 Version 1 received")


def test_unexpected_badvers():
    response = _edns_response(_soa())
    response.set_rcode(dns.rcode.BADVERS)

    result = _check(response, _basic(extended_rcode=NO_EXTENDED_RCODE))
    assert result == ValidationResult(False, "extended rcode 16 BADVERS")


def test_extended_rcode_value():
    response = _edns_response()
    assert extended_rcode(response) == NO_EXTENDED_RCODE

    response.set_rcode(dns.rcode.BADVERS)
    assert extended_rcode(response) == dns.rcode.BADVERS


@pytest.mark.parametrize("value,text", [(NO_EXTENDED_RCODE, "NONE"), (0, "NOERROR"), (16, "BADVERS")])
def test_rcode_text(value: int, text: str):
    assert rcode_text(value) == text


def test_reserved_flags():
    response = _edns_response(_soa())
    assert _check(response, _basic(reserved_flags_clear=True)).passed

    response.ednsflags |= 0x0080
    result = _check(response, _basic(reserved_flags_clear=True))
    assert result == ValidationResult(False, "unknown EDNS flags 0x0080 received")

    # reserved flags are not checked unless asked for
    assert _check(response, _basic()).passed


def test_do_bit_is_not_a_reserved_flag():
    response = _edns_response(_soa())
    response.want_dnssec(True)

    assert _check(response, _basic(reserved_flags_clear=True)).passed


# DO bit and RRSIG agreement


@pytest.mark.parametrize(
    "do,rrsig,reason",
    [
        (False, False, None),
        (True, True, None),
        (False, True, "RRSIG in answer without DO bit"),
        (True, False, "DO bit set without RRSIG in answer"),
    ],
)
def test_dnssec_ok_agreement(do: bool, rrsig: bool, reason: Optional[str]):
    query = _query("DNSSECOk")
    answer = (_soa(), _rrsig()) if rrsig else (_soa(),)
    response = _response(query, *answer)
    response.want_dnssec(do)

    assert _check(response, _expected("DNSSECOk")) == ValidationResult(reason is None, reason)


@pytest.mark.parametrize(
    "rule,do,reason",
    [
        (DoBitRule.MUST_BE_SET, True, None),
        (DoBitRule.MUST_BE_SET, False, "DO bit not set"),
        (DoBitRule.MUST_BE_CLEAR, False, None),
        (DoBitRule.MUST_BE_CLEAR, True, "DO bit set"),
    ],
)
def test_do_bit_rules(rule: DoBitRule, do: bool, reason: Optional[str]):
    response = _edns_response(_soa())
    response.want_dnssec(do)

    assert _check(response, _basic(do_bit=rule)) == ValidationResult(reason is None, reason)


# options


def test_option_must_be_absent():
    response = _edns_response(_soa())
    assert _check(response, _basic(option=MustBeAbsent(100))).passed

    response.use_edns(0, options=[dns.edns.GenericOption(200, b"\x01")])
    assert _check(response, _basic(option=MustBeAbsent(100))).passed

    response.use_edns(0, options=[dns.edns.GenericOption(100, b"\x01")])
    assert not _check(response, _basic(option=MustBeAbsent(100))).passed


def test_cookie_prefix_match():
    query = _query("DNSCookie")
    assert query.client_cookie is not None

    response = _response(query, _soa())
    server_cookie = b"\xaa" * 16
    response.use_edns(0, options=[dns.edns.GenericOption(COOKIE_OPTION_CODE, query.client_cookie + server_cookie)])

    assert _check(response, _expected("DNSCookie"), query.client_cookie).passed


def test_cookie_not_received():
    query = _query("DNSCookie")
    response = _response(query, _soa())

    result = _check(response, _expected("DNSCookie"), query.client_cookie)
    assert result == ValidationResult(False, f"option {COOKIE_OPTION_CODE} not received")


def test_cookie_prefix_mismatch():
    query = _query("DNSCookie")
    assert query.client_cookie is not None
    wrong = bytes(b ^ 0xFF for b in query.client_cookie)

    response = _response(query, _soa())
    response.use_edns(0, options=[dns.edns.GenericOption(COOKIE_OPTION_CODE, wrong + b"\xaa" * 8)])

    result = _check(response, _expected("DNSCookie"), query.client_cookie)
    assert not result.passed
    assert result.reason is not None
    assert result.reason.startswith(f"option {COOKIE_OPTION_CODE} data {wrong.hex()}")


def test_cookie_checked_against_own_query():
    spec = QuerySpec(SOA, edns=EdnsSpec(options=(CookieOptionSpec(),)))
    first = build(spec, ZONE)
    second = build(spec, ZONE)
    assert first.client_cookie is not None
    assert second.client_cookie is not None

    expected = _expected("DNSCookie")
    response = _response(first, _soa())
    response.use_edns(0, options=[dns.edns.GenericOption(COOKIE_OPTION_CODE, first.client_cookie + b"\xaa" * 8)])

    assert _check(response, expected, first.client_cookie).passed
    assert not _check(response, expected, second.client_cookie).passed


def test_explicit_prefix():
    response = _edns_response(_soa())
    response.use_edns(0, options=[dns.edns.GenericOption(300, b"\x01\x02\x03")])

    assert _check(response, _basic(option=MustBePresentAndPrefixMatch(300, b"\x01\x02"))).passed
    assert not _check(response, _basic(option=MustBePresentAndPrefixMatch(300, b"\x02"))).passed


def test_nothing_to_compare():
    response = _edns_response(_soa())
    result = _check(response, _basic(option=MustBePresentAndPrefixMatch(COOKIE_OPTION_CODE)))
    assert result == ValidationResult(False, f"nothing to compare option {COOKIE_OPTION_CODE} with")


def test_unknown_option_in_query_does_not_matter():
    query = build(QuerySpec(SOA, edns=EdnsSpec(options=(UnknownOptionSpec(100),))), ZONE)
    assert _check(_response(query, _soa()), _basic()).passed


# results


def test_no_answer():
    assert _check(None, _basic()) == ValidationResult(False, "no answer")


def test_raise_for_failure():
    ValidationResult(True).raise_for_failure()

    with pytest.raises(ValidationFailure) as error:
        ValidationResult(False, "rcode REFUSED").raise_for_failure()
    assert error.value.reason == "rcode REFUSED"
    assert str(error.value) == "rcode REFUSED"
