"""Transform Onionoo ``details`` documents into relay records."""

from dataclasses import dataclass, replace
from typing import Any, Collection, Iterable, List, Mapping, Tuple

from relay_scanner.addresses import encode_address, parse_addresses


@dataclass(frozen=True)
class Relay:
    """A relay as published by the directory service.

    Attributes:
        fingerprint: Stable relay identifier.
        or_addresses: Advertised OR addresses, as received.
    """

    fingerprint: str
    or_addresses: Tuple[str, ...]


def _relay_from_entry(entry: Any, index: int) -> Relay:
    if not isinstance(entry, Mapping):
        raise ValueError(f"relay #{index} is not an object")

    fingerprint = entry.get("fingerprint")
    if not isinstance(fingerprint, str):
        raise ValueError(f"relay #{index} has no string fingerprint")

    or_addresses = entry.get("or_addresses")
    if not isinstance(or_addresses, list) or not all(isinstance(a, str) for a in or_addresses):
        raise ValueError(f"relay {fingerprint} has no string list or_addresses")

    return Relay(fingerprint=fingerprint, or_addresses=tuple(or_addresses))


def extract_relays(payload: Any) -> List[Relay]:
    """Return the relays listed in an Onionoo ``details`` payload.

    Raises:
        ValueError: If the payload does not have the expected shape. A single
            bad entry invalidates the whole document.
    """
    if not isinstance(payload, Mapping):
        raise ValueError("payload is not a JSON object")
    entries = payload.get("relays")
    if not isinstance(entries, list):
        raise ValueError("payload has no 'relays' list")
    return [_relay_from_entry(entry, index) for index, entry in enumerate(entries)]


def filter_by_port(relays: Iterable[Relay], ports: Collection[int]) -> List[Relay]:
    """Narrow relays to the addresses whose port is in ``ports``.

    Each matching address yields its own single-address copy of the relay;
    relays without a matching address are dropped. An empty ``ports``
    collection leaves the pool unchanged.
    """
    if not ports:
        return list(relays)

    narrowed: List[Relay] = []
    for relay in relays:
        for address in parse_addresses(relay.or_addresses):
            if address.port in ports:
                narrowed.append(
                    replace(relay, or_addresses=(encode_address(address.host, address.port),))
                )
    return narrowed


__all__ = ["Relay", "extract_relays", "filter_by_port"]
