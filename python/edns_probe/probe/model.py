"""
Declarative description of the probe test cases.

A test case is data: a query description and the outcome expected from a compliant server.
Everything here is immutable, the registry is built from these types once at import time.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, Optional, Tuple, Union

import dns.rcode
import dns.rdatatype
from typing_extensions import Literal

from edns_probe.constants import DEFAULT_PORT, EDNS0_SIZE

TransportEnum = Literal["udp", "tcp"]


@dataclass(frozen=True)
class EndpointAddress:
    host: str
    port: int = DEFAULT_PORT
    transport: TransportEnum = "udp"

    def __post_init__(self) -> None:
        # raises ValueError for anything else than an IP literal
        ipaddress.ip_address(self.host)

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class UnknownOptionSpec:
    """EDNS option with an arbitrary code and opaque payload."""

    code: int
    payload: bytes = b""


@dataclass(frozen=True)
class CookieOptionSpec:
    """
    DNS Cookie option (RFC 7873) carrying only the client cookie.

    Without an explicit value a fresh random client cookie is drawn every time the query is built.
    """

    client_cookie: Optional[bytes] = None


OptionSpec = Union[UnknownOptionSpec, CookieOptionSpec]


@dataclass(frozen=True)
class EdnsSpec:
    payload: int = EDNS0_SIZE
    version: int = 0
    do_bit: bool = False
    # raw bits of the OPT flags field, sent as given even when they are reserved
    extra_flags: int = 0
    options: Tuple[OptionSpec, ...] = ()


@dataclass(frozen=True)
class QuerySpec:
    qtype: dns.rdatatype.RdataType
    # "@" is the zone apex, relative names are appended to the zone
    qname: str = "@"
    recursion_desired: bool = False
    authenticated_data: bool = True
    edns: Optional[EdnsSpec] = None


@dataclass(frozen=True)
class MustContainOnlyType:
    rdtype: dns.rdatatype.RdataType


@dataclass(frozen=True)
class MustBeEmpty:
    pass


@dataclass(frozen=True)
class MustContainTypesSubsetOf:
    rdtypes: FrozenSet[dns.rdatatype.RdataType]
    required: FrozenSet[dns.rdatatype.RdataType] = frozenset()


AnswerRule = Union[MustContainOnlyType, MustBeEmpty, MustContainTypesSubsetOf]


class EdnsPresence(Enum):
    REQUIRED = "required"
    FORBIDDEN = "forbidden"


class DoBitRule(Enum):
    MUST_MATCH_ANSWER_HAS_RRSIG = "must-match-answer-has-rrsig"
    MUST_BE_CLEAR = "must-be-clear"
    MUST_BE_SET = "must-be-set"


@dataclass(frozen=True)
class MustBeAbsent:
    code: int


@dataclass(frozen=True)
class MustBePresentAndPrefixMatch:
    code: int
    # None stands for the client cookie sent in the same query
    prefix: Optional[bytes] = None


OptionRule = Union[MustBeAbsent, MustBePresentAndPrefixMatch]


@dataclass(frozen=True)
class ExpectedOutcome:
    rcode: dns.rcode.Rcode
    answer: AnswerRule
    # None leaves the presence of OPT in the response unchecked
    edns: Optional[EdnsPresence]
    edns_version: Optional[int] = None
    extended_rcode: Optional[int] = None
    do_bit: Optional[DoBitRule] = None
    reserved_flags_clear: bool = False
    option: Optional[OptionRule] = None
    allow_truncation: bool = False


@dataclass(frozen=True)
class TestCase:
    name: str
    rationale: str
    query: QuerySpec
    expected: ExpectedOutcome

    # keep pytest from collecting this class
    __test__ = False


class Outcome(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    ERROR = "error"


@dataclass(frozen=True)
class TestResult:
    name: str
    outcome: Outcome
    reason: Optional[str] = field(default=None)

    __test__ = False

    @property
    def passed(self) -> bool:
        return self.outcome is Outcome.PASS

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "outcome": self.outcome.value, "reason": self.reason}
