import logging
import socket
import socketserver
import struct
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Type

import dns.flags
import dns.message
import dns.rdatatype
import dns.rrset
import pytest

SOA_TEXT = "ns1.example.com. hostmaster.example.com. 2024010101 7200 3600 1209600 3600"

# gets a parsed query, returns the wire to send back or None to stay silent
Behaviour = Callable[[dns.message.Message], Optional[bytes]]


def answer_soa(query: dns.message.Message) -> bytes:
    response = dns.message.make_response(query)
    if query.question[0].rdtype == dns.rdatatype.SOA:
        response.answer.append(dns.rrset.from_text(query.question[0].name, 3600, "IN", "SOA", SOA_TEXT))
    return response.to_wire()


def answer_truncated(query: dns.message.Message) -> bytes:
    response = dns.message.make_response(query)
    response.flags |= dns.flags.TC
    return response.to_wire()


def answer_garbage(query: dns.message.Message) -> bytes:
    return b"\x00\x01\x02"


def answer_nothing(query: dns.message.Message) -> Optional[bytes]:
    return None


def _recv_exact(sock: socket.socket, count: int) -> bytes:
    data = b""
    while len(data) < count:
        chunk = sock.recv(count - len(data))
        if not chunk:
            raise EOFError("connection closed")
        data += chunk
    return data


class _UDPHandler(socketserver.BaseRequestHandler):
    def handle(self) -> None:
        data, sock = self.request
        wire = self.server.behaviour(dns.message.from_wire(data))  # type: ignore[attr-defined]
        if wire is not None:
            sock.sendto(wire, self.client_address)


class _TCPHandler(socketserver.BaseRequestHandler):
    def handle(self) -> None:
        (length,) = struct.unpack("!H", _recv_exact(self.request, 2))
        query = dns.message.from_wire(_recv_exact(self.request, length))
        wire = self.server.behaviour(query)  # type: ignore[attr-defined]
        if wire is not None:
            self.request.sendall(struct.pack("!H", len(wire)) + wire)


class _UDPServer(socketserver.ThreadingUDPServer):
    daemon_threads = True
    behaviour: Behaviour = staticmethod(answer_soa)  # type: ignore[assignment]


class _TCPServer(socketserver.ThreadingTCPServer):
    daemon_threads = True
    allow_reuse_address = True
    behaviour: Behaviour = staticmethod(answer_soa)  # type: ignore[assignment]


@contextmanager
def _serve(server_cls: Type[socketserver.BaseServer], handler_cls: Type[socketserver.BaseRequestHandler]) -> Iterator:
    server = server_cls(("127.0.0.1", 0), handler_cls)
    thread = threading.Thread(target=server.serve_forever, kwargs={"poll_interval": 0.05}, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()
        thread.join()


@pytest.fixture
def udp_responder():
    """Local UDP name-server, its answers are set by assigning 'behaviour'."""
    with _serve(_UDPServer, _UDPHandler) as server:
        yield server


@pytest.fixture
def tcp_responder():
    """Local TCP name-server, its answers are set by assigning 'behaviour'."""
    with _serve(_TCPServer, _TCPHandler) as server:
        yield server


@pytest.fixture
def closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture(autouse=True)
def restore_logging():
    """Commands configure the root logger, put it back the way pytest set it up."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
