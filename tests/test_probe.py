import socket

import pytest

import relay_scanner.network.probe as probe_mod
from relay_scanner.addresses import ParsedAddress

from conftest import make_relay


class FakeSocket:
    """Socket stub whose ``connect`` behaviour is chosen per sockaddr."""

    outcomes = {}
    connected = []

    def __init__(self, family, socktype, proto):
        self.timeout = None

    def settimeout(self, value):
        self.timeout = value

    def connect(self, sockaddr):
        FakeSocket.connected.append((sockaddr, self.timeout))
        error = FakeSocket.outcomes.get(sockaddr)
        if error is not None:
            raise error

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


@pytest.fixture
def fake_socket(monkeypatch):
    FakeSocket.outcomes = {}
    FakeSocket.connected = []
    monkeypatch.setattr(probe_mod.socket, "socket", FakeSocket)
    return FakeSocket


def _addrinfo(*sockaddrs):
    return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", sa) for sa in sockaddrs]


def test_check_connection_success_uses_timeout(monkeypatch, fake_socket):
    monkeypatch.setattr(
        probe_mod.socket, "getaddrinfo", lambda host, port, type: _addrinfo(("10.0.0.1", 443))
    )

    assert probe_mod.check_connection("10.0.0.1", 443, 2.5) is True
    assert fake_socket.connected == [(("10.0.0.1", 443), 2.5)]


def test_check_connection_tries_every_resolved_address(monkeypatch, fake_socket):
    monkeypatch.setattr(
        probe_mod.socket,
        "getaddrinfo",
        lambda host, port, type: _addrinfo(("10.0.0.1", 443), ("10.0.0.2", 443)),
    )
    fake_socket.outcomes = {("10.0.0.1", 443): socket.timeout("timed out")}

    assert probe_mod.check_connection("relay.example", 443, 1.0) is True
    assert [sa for sa, _ in fake_socket.connected] == [("10.0.0.1", 443), ("10.0.0.2", 443)]


@pytest.mark.parametrize(
    "error",
    [ConnectionRefusedError("refused"), socket.timeout("timed out"), OSError("unreachable")],
)
def test_check_connection_failures_are_unreachable(monkeypatch, fake_socket, error):
    monkeypatch.setattr(
        probe_mod.socket, "getaddrinfo", lambda host, port, type: _addrinfo(("10.0.0.1", 443))
    )
    fake_socket.outcomes = {("10.0.0.1", 443): error}

    assert probe_mod.check_connection("10.0.0.1", 443, 1.0) is False


def test_check_connection_resolution_failure(monkeypatch, fake_socket):
    def fail(host, port, type):
        raise socket.gaierror("Name or service not known")

    monkeypatch.setattr(probe_mod.socket, "getaddrinfo", fail)

    assert probe_mod.check_connection("nowhere.invalid", 443, 1.0) is False
    assert fake_socket.connected == []


def test_check_connection_against_local_listener():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server:
        server.bind(("127.0.0.1", 0))
        server.listen(1)
        port = server.getsockname()[1]

        assert probe_mod.check_connection("127.0.0.1", port, 2.0) is True


def test_probe_relay_tries_all_addresses_in_order():
    relay = make_relay("BBB", "[2001:db8::1]:9001", "bogus", "10.0.0.2:9001", "10.0.0.3:443")
    calls = []

    def connect(host, port, timeout):
        calls.append((host, port, timeout))
        return host != "10.0.0.2"

    outcome = probe_mod.probe_relay(relay, 3.0, connect=connect)

    assert calls == [("2001:db8::1", 9001, 3.0), ("10.0.0.2", 9001, 3.0), ("10.0.0.3", 443, 3.0)]
    assert outcome.relay is relay
    assert outcome.reachable == (ParsedAddress("2001:db8::1", 9001), ParsedAddress("10.0.0.3", 443))
    assert outcome.is_reachable


def test_probe_relay_unreachable_outcome_is_empty():
    outcome = probe_mod.probe_relay(make_relay("AAA", "10.0.0.1:443"), 1.0, connect=lambda *a: False)

    assert outcome.reachable == ()
    assert not outcome.is_reachable
