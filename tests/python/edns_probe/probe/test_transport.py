import ipaddress

import dns.flags
import dns.rdatatype
import pytest

from conftest import answer_garbage, answer_nothing, answer_truncated
from edns_probe.probe.builder import build
from edns_probe.probe.model import EdnsSpec, EndpointAddress, QuerySpec
from edns_probe.probe.transport import TransportError, TransportErrorKind, exchange, resolve_endpoint

ZONE = "example.com."


def _soa_query():
    return build(QuerySpec(dns.rdatatype.SOA, edns=EdnsSpec()), ZONE).message


def _dnskey_query():
    return build(QuerySpec(dns.rdatatype.DNSKEY, edns=EdnsSpec(payload=512, do_bit=True)), ZONE).message


def test_udp_exchange(udp_responder):
    endpoint = EndpointAddress("127.0.0.1", udp_responder.server_address[1])

    result = exchange(endpoint, _soa_query(), 2.0)

    assert not result.truncated
    assert result.elapsed >= 0
    assert result.response.opt is not None
    assert [rrset.rdtype for rrset in result.response.answer] == [dns.rdatatype.SOA]


def test_udp_truncated(udp_responder):
    udp_responder.behaviour = answer_truncated
    endpoint = EndpointAddress("127.0.0.1", udp_responder.server_address[1])

    result = exchange(endpoint, _dnskey_query(), 2.0)

    # truncation is reported, not raised, and there is no retry over TCP
    assert result.truncated
    assert result.response.flags & dns.flags.TC
    assert result.response.opt is not None
    assert result.response.edns == 0


def test_udp_timeout(udp_responder):
    udp_responder.behaviour = answer_nothing
    endpoint = EndpointAddress("127.0.0.1", udp_responder.server_address[1])

    with pytest.raises(TransportError) as error:
        exchange(endpoint, _soa_query(), 0.3)
    assert error.value.kind is TransportErrorKind.TIMEOUT
    assert str(error.value).startswith("timeout")


def test_udp_malformed(udp_responder):
    udp_responder.behaviour = answer_garbage
    endpoint = EndpointAddress("127.0.0.1", udp_responder.server_address[1])

    with pytest.raises(TransportError) as error:
        exchange(endpoint, _soa_query(), 2.0)
    assert error.value.kind is TransportErrorKind.MALFORMED


def test_tcp_exchange(tcp_responder):
    endpoint = EndpointAddress("127.0.0.1", tcp_responder.server_address[1], "tcp")

    result = exchange(endpoint, _soa_query(), 2.0)

    assert not result.truncated
    assert [rrset.rdtype for rrset in result.response.answer] == [dns.rdatatype.SOA]


def test_tcp_truncated_flag(tcp_responder):
    tcp_responder.behaviour = answer_truncated
    endpoint = EndpointAddress("127.0.0.1", tcp_responder.server_address[1], "tcp")

    assert exchange(endpoint, _dnskey_query(), 2.0).truncated


def test_tcp_connection_closed(tcp_responder):
    tcp_responder.behaviour = answer_nothing
    endpoint = EndpointAddress("127.0.0.1", tcp_responder.server_address[1], "tcp")

    with pytest.raises(TransportError) as error:
        exchange(endpoint, _soa_query(), 2.0)
    assert error.value.kind is TransportErrorKind.MALFORMED


def test_tcp_connection_refused(closed_port: int):
    endpoint = EndpointAddress("127.0.0.1", closed_port, "tcp")

    with pytest.raises(TransportError) as error:
        exchange(endpoint, _soa_query(), 2.0)
    assert error.value.kind is TransportErrorKind.CONNECTION_REFUSED


def test_transport_error_str():
    assert str(TransportError(TransportErrorKind.TIMEOUT)) == "timeout"
    assert str(TransportError(TransportErrorKind.OTHER, OSError("boom"))) == "other: boom"


@pytest.mark.parametrize("host,text", [("192.0.2.1", "192.0.2.1:53"), ("2001:db8::1", "[2001:db8::1]:53")])
def test_endpoint_address(host: str, text: str):
    assert str(EndpointAddress(host)) == text


def test_endpoint_address_not_ip():
    with pytest.raises(ValueError):
        EndpointAddress("ns1.example.com")


def test_resolve_endpoint_ip():
    assert resolve_endpoint("127.0.0.1", 5353, "tcp") == EndpointAddress("127.0.0.1", 5353, "tcp")


def test_resolve_endpoint_host_name():
    endpoint = resolve_endpoint("localhost", 53)

    assert ipaddress.ip_address(endpoint.host).is_loopback
    assert endpoint.port == 53
    assert endpoint.transport == "udp"
