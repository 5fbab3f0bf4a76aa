"""Find Tor relays reachable from the current network position."""

__version__ = "0.3.0"
