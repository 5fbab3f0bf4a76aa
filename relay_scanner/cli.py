"""Command-line entrypoint for scanning reachable Tor relays."""

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from relay_scanner.api import OnionooClient, SourceUnavailable
from relay_scanner.config import AppConfig, load_config
from relay_scanner.jobs import ScanConfig, run_scan
from relay_scanner.logging_utils import configure_logging
from relay_scanner.output import ResultWriter

LOGGER = logging.getLogger(__name__)

DESCRIPTION = (
    "Downloads all Tor Relay IP addresses from onionoo.torproject.org and "
    "checks whether random Relays are available."
)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value}")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {value}")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if not number > 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


def _port(value: str) -> int:
    number = int(value)
    if not 1 <= number <= 65535:
        raise argparse.ArgumentTypeError(f"not a valid TCP port: {value}")
    return number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=DESCRIPTION)
    parser.add_argument(
        "-n",
        "--num-relays",
        type=_positive_int,
        default=30,
        help="Relays tested concurrently per attempt (default: 30).",
    )
    parser.add_argument(
        "-g",
        "--working-relay-num-goal",
        type=_non_negative_int,
        default=10,
        help="Stop once this many reachable relays are found (default: 10).",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=10.0,
        help="Seconds allowed per connection and download (default: 10.0).",
    )
    parser.add_argument(
        "-o",
        "--outfile",
        type=Path,
        default=None,
        help="Write reachable relays to this file instead of stdout.",
    )
    parser.add_argument(
        "--torrc",
        dest="torrc_fmt",
        action="store_true",
        help="Output relays as torrc 'Bridge' lines.",
    )
    parser.add_argument(
        "--proxy",
        type=str,
        default=None,
        help="Proxy for the relay list download (e.g. socks5h://127.0.0.1:9050).",
    )
    parser.add_argument(
        "--url",
        action="append",
        default=[],
        help="Extra relay list mirror, tried after the primary source (repeatable).",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=_port,
        action="append",
        default=[],
        help="Only test relay addresses on this port (repeatable).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = load_config()
    except ValueError as exc:
        configure_logging(AppConfig(log_directory=None, log_level="INFO"))
        LOGGER.error("Failed to load configuration: %s", exc)
        return 1

    configure_logging(config)

    scan_config = ScanConfig(
        batch_size=args.num_relays,
        goal=args.working_relay_num_goal,
        timeout=args.timeout,
        ports=tuple(args.port),
        extra_urls=tuple(args.url) or config.source_urls,
        proxy=args.proxy or config.proxy,
    )

    LOGGER.info("Tor Relay Scanner. Will scan for up to %d working relays.", scan_config.goal)

    writer = ResultWriter(outfile=args.outfile, torrc_fmt=args.torrc_fmt)
    writer.prepare()

    LOGGER.info("Downloading Tor Relay information...")
    with OnionooClient(timeout=scan_config.timeout, proxy=scan_config.proxy) as api_client:
        try:
            summary = run_scan(api_client, scan_config, on_reachable=writer.write)
        except SourceUnavailable as exc:
            LOGGER.error("%s", exc)
            return 1

    LOGGER.info("--- Scan Complete ---")
    if summary.found:
        LOGGER.info("Found %d working relays in total.", len(summary.found))
    else:
        LOGGER.info("No working relays found.")
    writer.finish(len(summary.found))

    LOGGER.info("Done.")
    return 0


__all__ = ["main", "parse_args"]
