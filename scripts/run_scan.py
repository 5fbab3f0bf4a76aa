#!/usr/bin/env python3
"""Command-line entrypoint for running a relay reachability scan."""

from relay_scanner.cli import main

if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
