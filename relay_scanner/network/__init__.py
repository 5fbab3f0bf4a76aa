"""Network reachability probing.

Exports:
- ``ProbeOutcome``: the reachable subset of one relay's addresses.
- ``check_connection``: single TCP connect probe with a timeout.
- ``probe_relay``: probe every address of a relay in order.
"""

from relay_scanner.network.probe import (
    Connector,
    ProbeOutcome,
    check_connection,
    probe_relay,
)

__all__ = [
    "Connector",
    "ProbeOutcome",
    "check_connection",
    "probe_relay",
]
