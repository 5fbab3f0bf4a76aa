"""Result output for reachable relays."""

from relay_scanner.output.writer import ResultWriter, format_outcome

__all__ = ["ResultWriter", "format_outcome"]
