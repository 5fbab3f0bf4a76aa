"""Parse and format relay OR addresses (``host:port`` and ``[ipv6]:port``)."""

import logging
from dataclasses import dataclass
from typing import Iterable, List

LOGGER = logging.getLogger(__name__)

MAX_PORT = 65535


class MalformedAddress(ValueError):
    """Raised when an address string is not ``host:port`` or ``[ipv6]:port``."""


@dataclass(frozen=True)
class ParsedAddress:
    """A decoded relay address.

    Args:
        host: Hostname or IP literal, without IPv6 brackets.
        port: TCP port.
    """

    host: str
    port: int

    def encode(self) -> str:
        """Return the canonical wire form of this address."""
        return encode_address(self.host, self.port)

    def __str__(self) -> str:
        return self.encode()


def encode_address(host: str, port: int) -> str:
    """Format ``host`` and ``port``, bracketing hosts that look like IPv6."""
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def decode_address(raw: str) -> ParsedAddress:
    """Decode a raw address string into a ``ParsedAddress``.

    The port is split off at the last ``:``. Surrounding brackets are removed
    from the host. A host that still contains ``:`` must have been bracketed,
    so a bare IPv6 literal is rejected rather than split at its last group.

    Raises:
        MalformedAddress: If the string has no port, a non-numeric or
            out-of-range port, an unbracketed IPv6 host, or an empty host.
    """
    host_part, sep, port_text = raw.rpartition(":")
    if not sep:
        raise MalformedAddress(f"missing port in address {raw!r}")
    if not (port_text.isascii() and port_text.isdigit()):
        raise MalformedAddress(f"invalid port in address {raw!r}")
    port = int(port_text)
    if port > MAX_PORT:
        raise MalformedAddress(f"port out of range in address {raw!r}")

    host = host_part
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise MalformedAddress(f"IPv6 host must be bracketed in address {raw!r}")
    if not host:
        raise MalformedAddress(f"missing host in address {raw!r}")
    return ParsedAddress(host=host, port=port)


def parse_addresses(raw_addresses: Iterable[str]) -> List[ParsedAddress]:
    """Decode every address in order, skipping the malformed ones."""
    parsed: List[ParsedAddress] = []
    for raw in raw_addresses:
        try:
            parsed.append(decode_address(raw))
        except MalformedAddress as exc:
            LOGGER.debug("Skipping address: %s", exc)
    return parsed


__all__ = [
    "MalformedAddress",
    "ParsedAddress",
    "decode_address",
    "encode_address",
    "parse_addresses",
]
