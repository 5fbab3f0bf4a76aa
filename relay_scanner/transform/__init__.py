"""Transformation helpers for directory service documents."""

from relay_scanner.transform.relays import Relay, extract_relays, filter_by_port

__all__ = ["Relay", "extract_relays", "filter_by_port"]
