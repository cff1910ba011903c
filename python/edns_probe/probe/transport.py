from __future__ import annotations

import socket
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import dns.exception
import dns.flags
import dns.message
import dns.query

from edns_probe.errors import EdnsProbeError
from edns_probe.logging import get_logger

from .model import EndpointAddress, TransportEnum

logger = get_logger(__name__)


class TransportErrorKind(Enum):
    TIMEOUT = "timeout"
    MALFORMED = "malformed"
    CONNECTION_REFUSED = "connection refused"
    OTHER = "other"


class TransportError(EdnsProbeError):
    def __init__(self, kind: TransportErrorKind, cause: Optional[BaseException] = None) -> None:
        super().__init__(kind, cause)
        self.kind = kind
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None or not str(self.cause):
            return self.kind.value
        return f"{self.kind.value}: {self.cause}"


@dataclass(frozen=True)
class Exchange:
    response: dns.message.Message
    # the TC bit was set, the message holds whatever could be decoded
    truncated: bool = False
    elapsed: float = 0.0


def _send(endpoint: EndpointAddress, query: dns.message.Message, timeout: float) -> tuple[dns.message.Message, bool]:
    if endpoint.transport == "tcp":
        response = dns.query.tcp(query, endpoint.host, timeout=timeout, port=endpoint.port)
        return response, bool(response.flags & dns.flags.TC)

    try:
        response = dns.query.udp(
            query,
            endpoint.host,
            timeout=timeout,
            port=endpoint.port,
            raise_on_truncation=True,
        )
    except dns.message.Truncated as e:
        return e.message(), True
    return response, False


def exchange(endpoint: EndpointAddress, query: dns.message.Message, timeout: float) -> Exchange:
    """
    Send a single query and wait at most 'timeout' seconds for the matching response.

    There is no retry and no fallback to TCP. A truncated response is not an error here, it is
    returned with the 'truncated' flag so the caller can decide whether it is acceptable.
    """

    logger.debug("query to %s:\n%s", endpoint, query)
    start = time.monotonic()
    try:
        response, truncated = _send(endpoint, query, timeout)
    except dns.exception.Timeout as e:
        raise TransportError(TransportErrorKind.TIMEOUT, e) from e
    except dns.exception.DNSException as e:
        raise TransportError(TransportErrorKind.MALFORMED, e) from e
    except EOFError as e:
        # TCP connection closed before the whole response was read
        raise TransportError(TransportErrorKind.MALFORMED, e) from e
    except ConnectionRefusedError as e:
        raise TransportError(TransportErrorKind.CONNECTION_REFUSED, e) from e
    except OSError as e:
        raise TransportError(TransportErrorKind.OTHER, e) from e
    elapsed = time.monotonic() - start

    logger.debug("response from %s in %.3fs%s:\n%s", endpoint, elapsed, " (truncated)" if truncated else "", response)
    return Exchange(response, truncated, elapsed)


def resolve_endpoint(host: str, port: int, transport: TransportEnum = "udp") -> EndpointAddress:
    """Resolve a host name to the first address returned by the system resolver."""

    socktype = socket.SOCK_STREAM if transport == "tcp" else socket.SOCK_DGRAM
    infos = socket.getaddrinfo(host, port, type=socktype)
    if not infos:
        raise socket.gaierror(f"no address found for '{host}'")
    address = infos[0][4][0]
    # drop IPv6 scope id
    address = address.split("%", 1)[0]
    return EndpointAddress(address, port, transport)
