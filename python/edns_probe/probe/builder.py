from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import List, Optional

import dns.edns
import dns.flags
import dns.message
import dns.name

from .model import CookieOptionSpec, EdnsSpec, QuerySpec, UnknownOptionSpec

CLIENT_COOKIE_LEN = 8


@dataclass(frozen=True)
class BuiltQuery:
    message: dns.message.QueryMessage
    # client cookie sent in the query, if any
    client_cookie: Optional[bytes] = None


def resolve_qname(qname: str, zone: str) -> dns.name.Name:
    origin = dns.name.from_text(zone)
    if qname == "@":
        return origin
    return dns.name.from_text(qname, origin=origin)


def new_client_cookie() -> bytes:
    return secrets.token_bytes(CLIENT_COOKIE_LEN)


def _build_options(edns: EdnsSpec) -> tuple[List[dns.edns.Option], Optional[bytes]]:
    options: List[dns.edns.Option] = []
    client_cookie: Optional[bytes] = None

    for spec in edns.options:
        if isinstance(spec, UnknownOptionSpec):
            options.append(dns.edns.GenericOption(spec.code, spec.payload))
        elif isinstance(spec, CookieOptionSpec):
            client_cookie = spec.client_cookie if spec.client_cookie is not None else new_client_cookie()
            if len(client_cookie) != CLIENT_COOKIE_LEN:
                raise ValueError(f"client cookie must be {CLIENT_COOKIE_LEN} bytes long, got {len(client_cookie)}")
            options.append(dns.edns.GenericOption(dns.edns.OptionType.COOKIE, client_cookie))
        else:
            raise TypeError(f"unsupported option specification '{spec!r}'")
    return options, client_cookie


def build(spec: QuerySpec, zone: str) -> BuiltQuery:
    """
    Build the DNS query described by 'spec' for the given zone.

    When 'spec.edns' is set, exactly one OPT record is attached with the declared payload
    size, version, DO bit and extra flag bits, followed by the options in declaration order.
    Nothing else is added implicitly. Out of range versions and reserved flag bits are sent
    verbatim.
    """

    qname = resolve_qname(spec.qname, zone)

    if spec.edns is None:
        query = dns.message.make_query(qname, spec.qtype, use_edns=False)
        client_cookie = None
    else:
        options, client_cookie = _build_options(spec.edns)
        ednsflags = spec.edns.extra_flags & 0xFFFF
        if spec.edns.do_bit:
            ednsflags |= dns.flags.DO
        query = dns.message.make_query(
            qname,
            spec.qtype,
            use_edns=spec.edns.version,
            ednsflags=ednsflags,
            want_dnssec=spec.edns.do_bit,
            payload=spec.edns.payload,
            options=options,
        )

    if spec.recursion_desired:
        query.flags |= dns.flags.RD
    else:
        query.flags &= ~int(dns.flags.RD)
    if spec.authenticated_data:
        query.flags |= dns.flags.AD
    else:
        query.flags &= ~int(dns.flags.AD)

    return BuiltQuery(query, client_cookie)
