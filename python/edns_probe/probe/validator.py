"""
Response validation.

The validator evaluates an ExpectedOutcome against a decoded response as a fixed sequence of
checks. The first failing check wins and its reason is reported, later checks are not run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import dns.edns
import dns.flags
import dns.message
import dns.rcode
import dns.rdatatype

from edns_probe.errors import EdnsProbeError

from .model import (
    DoBitRule,
    EdnsPresence,
    ExpectedOutcome,
    MustBeAbsent,
    MustBeEmpty,
    MustBePresentAndPrefixMatch,
    MustContainOnlyType,
    MustContainTypesSubsetOf,
)

# reported extended RCODE when the upper 8 bits in the OPT TTL are zero
NO_EXTENDED_RCODE = 15
# OPT flag bits not covered by DO
RESERVED_FLAGS_MASK = 0x7FFF


class ValidationFailure(EdnsProbeError):
    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    def __str__(self) -> str:
        return self.reason


@dataclass(frozen=True)
class ValidationResult:
    passed: bool
    reason: Optional[str] = None

    def raise_for_failure(self) -> None:
        if not self.passed:
            raise ValidationFailure(self.reason or "validation failed")


@dataclass(frozen=True)
class _Subject:
    response: dns.message.Message
    client_cookie: Optional[bytes]
    expected: ExpectedOutcome


def base_rcode(response: dns.message.Message) -> int:
    return int(response.flags) & 0x000F


def extended_rcode(response: dns.message.Message) -> int:
    """
    Extended RCODE as reported by the probe.

    The upper 8 bits of the 12-bit RCODE live in the OPT TTL. When they are zero the response
    carries no extended condition, which is reported as 15. Otherwise the full RCODE is
    returned, e.g. 16 for BADVERS.
    """

    upper = (int(response.ednsflags) >> 24) & 0xFF
    if upper == 0:
        return NO_EXTENDED_RCODE
    return (upper << 4) | base_rcode(response)


def rcode_text(value: int) -> str:
    if value == NO_EXTENDED_RCODE:
        return "NONE"
    return dns.rcode.to_text(value)


def answer_types(response: dns.message.Message) -> List[dns.rdatatype.RdataType]:
    return [rrset.rdtype for rrset in response.answer]


def has_rrsig(response: dns.message.Message) -> bool:
    return dns.rdatatype.RRSIG in answer_types(response)


def do_bit(response: dns.message.Message) -> bool:
    return bool(int(response.ednsflags) & dns.flags.DO)


def find_options(response: dns.message.Message, code: int) -> List[dns.edns.Option]:
    return [opt for opt in response.options if opt.otype == code]


def _type_text(rdtype: int) -> str:
    return dns.rdatatype.to_text(rdtype)


def _check_rcode(subject: _Subject) -> Optional[str]:
    rcode = base_rcode(subject.response)
    if rcode != subject.expected.rcode:
        return f"rcode {rcode_text(rcode)}"
    return None


def _check_answer(subject: _Subject) -> Optional[str]:
    rule = subject.expected.answer
    types = answer_types(subject.response)

    if isinstance(rule, MustBeEmpty):
        if types:
            return "unexpected answer"
        return None

    if isinstance(rule, MustContainOnlyType):
        for rdtype in types:
            if rdtype != rule.rdtype:
                return f"unexpected answer {_type_text(rdtype)}"
        if not types:
            return f"no {_type_text(rule.rdtype)} in answer"
        return None

    if isinstance(rule, MustContainTypesSubsetOf):
        for rdtype in types:
            if rdtype not in rule.rdtypes:
                return f"unexpected answer {_type_text(rdtype)}"
        for rdtype in sorted(rule.required):
            if rdtype not in types:
                return f"no {_type_text(rdtype)} in answer"
        return None

    raise TypeError(f"unsupported answer rule '{rule!r}'")


def _check_edns_presence(subject: _Subject) -> Optional[str]:
    present = subject.response.opt is not None
    if subject.expected.edns is EdnsPresence.REQUIRED and not present:
        return "No OPT received"
    if subject.expected.edns is EdnsPresence.FORBIDDEN and present:
        return "OPT received"
    return None


def _check_edns_version(subject: _Subject) -> Optional[str]:
    if subject.response.opt is None or subject.expected.edns_version is None:
        return None
    # a server answers with the highest version it implements, BADVERS included
    if subject.response.edns != subject.expected.edns_version:
        return f"EDNS0 Version {subject.response.edns} received"
    return None


def _check_extended_rcode(subject: _Subject) -> Optional[str]:
    if subject.response.opt is None or subject.expected.extended_rcode is None:
        return None
    value = extended_rcode(subject.response)
    if value != subject.expected.extended_rcode:
        return f"extended rcode {value} {rcode_text(value)}"
    return None


def _check_reserved_flags(subject: _Subject) -> Optional[str]:
    if subject.response.opt is None or not subject.expected.reserved_flags_clear:
        return None
    flags = int(subject.response.ednsflags) & RESERVED_FLAGS_MASK
    if flags:
        return f"unknown EDNS flags {flags:#06x} received"
    return None


def _check_do_bit(subject: _Subject) -> Optional[str]:
    rule = subject.expected.do_bit
    if rule is None:
        return None

    do = do_bit(subject.response)
    if rule is DoBitRule.MUST_MATCH_ANSWER_HAS_RRSIG:
        rrsig = has_rrsig(subject.response)
        if rrsig and not do:
            return "RRSIG in answer without DO bit"
        if do and not rrsig:
            return "DO bit set without RRSIG in answer"
    elif rule is DoBitRule.MUST_BE_CLEAR and do:
        return "DO bit set"
    elif rule is DoBitRule.MUST_BE_SET and not do:
        return "DO bit not set"
    return None


def _check_option(subject: _Subject) -> Optional[str]:
    rule = subject.expected.option
    if rule is None:
        return None

    found = find_options(subject.response, rule.code)
    if isinstance(rule, MustBeAbsent):
        if found:
            return f"option data received (option {rule.code})"
        return None

    if isinstance(rule, MustBePresentAndPrefixMatch):
        prefix = rule.prefix if rule.prefix is not None else subject.client_cookie
        if prefix is None:
            return f"nothing to compare option {rule.code} with"
        if not found:
            return f"option {rule.code} not received"
        # servers append their own part after the echoed client value
        data = found[0].to_wire() or b""
        if not data.startswith(prefix):
            return f"option {rule.code} data {data.hex()} does not start with {prefix.hex()}"
        return None

    raise TypeError(f"unsupported option rule '{rule!r}'")


Check = Callable[[_Subject], Optional[str]]

CHECKS: Tuple[Check, ...] = (
    _check_rcode,
    _check_answer,
    _check_edns_presence,
    _check_edns_version,
    _check_extended_rcode,
    _check_reserved_flags,
    _check_do_bit,
    _check_option,
)


def validate(
    response: Optional[dns.message.Message],
    client_cookie: Optional[bytes],
    expected: ExpectedOutcome,
) -> ValidationResult:
    if response is None:
        return ValidationResult(False, "no answer")

    subject = _Subject(response, client_cookie, expected)
    for check in CHECKS:
        reason = check(subject)
        if reason is not None:
            return ValidationResult(False, reason)
    return ValidationResult(True)
