"""Emit reachable relays to stdout or an output file.

Each reachable address becomes one ``<address> <fingerprint>`` line. In torrc
mode every line is prefixed with ``Bridge`` and a final ``UseBridges 1`` is
appended (or suggested on the console).
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

from relay_scanner.network import ProbeOutcome

LOGGER = logging.getLogger(__name__)

BRIDGE_PREFIX = "Bridge "
USE_BRIDGES_LINE = "UseBridges 1"


def format_outcome(outcome: ProbeOutcome, torrc_fmt: bool = False) -> str:
    """Return one line per reachable address of ``outcome``."""
    prefix = BRIDGE_PREFIX if torrc_fmt else ""
    return "".join(
        f"{prefix}{address.encode()} {outcome.relay.fingerprint}\n"
        for address in outcome.reachable
    )


class ResultWriter:
    """Streams reachable relays as they are found."""

    def __init__(
        self,
        outfile: Optional[Path] = None,
        torrc_fmt: bool = False,
        stream: Optional[TextIO] = None,
    ) -> None:
        self._outfile = outfile
        self._torrc_fmt = torrc_fmt
        self._stream = stream or sys.stdout

    def prepare(self) -> None:
        """Create (or truncate) the output file before the scan starts."""
        if self._outfile is None:
            return
        self._outfile.parent.mkdir(parents=True, exist_ok=True)
        self._outfile.write_text("", encoding="utf-8")

    def write(self, outcome: ProbeOutcome) -> None:
        text = format_outcome(outcome, self._torrc_fmt)
        if self._outfile is not None:
            with self._outfile.open("a", encoding="utf-8") as handle:
                handle.write(text)
        else:
            self._stream.write(text)
            self._stream.flush()

    def finish(self, found_count: int) -> None:
        """Write the torrc trailer once at least one relay was found."""
        if found_count == 0:
            return
        if self._outfile is not None:
            LOGGER.info("Results saved to %s", self._outfile)
            if self._torrc_fmt:
                with self._outfile.open("a", encoding="utf-8") as handle:
                    handle.write(f"{USE_BRIDGES_LINE}\n")
        elif self._torrc_fmt:
            self._stream.write(f"Add the following line to your torrc file:\n{USE_BRIDGES_LINE}\n")
            self._stream.flush()


__all__ = ["BRIDGE_PREFIX", "ResultWriter", "USE_BRIDGES_LINE", "format_outcome"]
