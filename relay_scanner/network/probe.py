"""TCP reachability probes for relay OR addresses.

A relay counts as reachable on an address when a plain TCP connection to it
is established within the timeout. No Tor handshake is attempted.
"""

import logging
import socket
from dataclasses import dataclass
from typing import Callable, List, Tuple

from relay_scanner.addresses import ParsedAddress, parse_addresses
from relay_scanner.transform import Relay

LOGGER = logging.getLogger(__name__)

Connector = Callable[[str, int, float], bool]


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of probing every address of one relay.

    Attributes:
        relay: The probed relay.
        reachable: Addresses that accepted a connection, in advertised order.
    """

    relay: Relay
    reachable: Tuple[ParsedAddress, ...]

    @property
    def is_reachable(self) -> bool:
        return bool(self.reachable)


def check_connection(host: str, port: int, timeout: float) -> bool:
    """Return True if a TCP connection to ``host:port`` opens within ``timeout``.

    Every resolved socket address is tried in turn; refusals, timeouts and
    resolution failures all count as unreachable.
    """
    try:
        addr_info = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except (OSError, UnicodeError) as exc:
        LOGGER.debug("Resolution failed for %s:%s: %s", host, port, exc)
        return False

    for family, socktype, proto, _, sockaddr in addr_info:
        try:
            with socket.socket(family, socktype, proto) as sock:
                sock.settimeout(timeout)
                sock.connect(sockaddr)
            return True
        except OSError as exc:
            LOGGER.debug("Connect to %s failed: %s", sockaddr, exc)
    return False


def probe_relay(relay: Relay, timeout: float, connect: Connector = check_connection) -> ProbeOutcome:
    """Try each address of ``relay`` sequentially and collect those that answered."""
    reachable: List[ParsedAddress] = []
    for address in parse_addresses(relay.or_addresses):
        if connect(address.host, address.port, timeout):
            reachable.append(address)
    return ProbeOutcome(relay=relay, reachable=tuple(reachable))


__all__ = ["Connector", "ProbeOutcome", "check_connection", "probe_relay"]
