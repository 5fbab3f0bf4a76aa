"""Scan runner: fetch relays, then probe shuffled batches until the goal is met."""

import logging
import random
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, List, MutableSequence, Optional, Sequence, Tuple, TypeVar

from relay_scanner.api import OnionooClient
from relay_scanner.logging_utils import perf, perf_span
from relay_scanner.network import ProbeOutcome, probe_relay
from relay_scanner.transform import Relay, filter_by_port

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")
Prober = Callable[[Relay, float], ProbeOutcome]


@dataclass(frozen=True)
class ScanConfig:
    batch_size: int = 30
    goal: int = 10
    timeout: float = 10.0
    ports: Tuple[int, ...] = ()
    extra_urls: Tuple[str, ...] = ()
    proxy: Optional[str] = None

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.goal < 0:
            raise ValueError("goal must be non-negative")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        for port in self.ports:
            if not 1 <= port <= 65535:
                raise ValueError(f"port out of range: {port}")


@dataclass(frozen=True)
class ScanSummary:
    """What a finished scan saw and found."""

    goal: int
    total_candidates: int
    total_batches: int
    batches_run: int
    found: Tuple[ProbeOutcome, ...] = field(default_factory=tuple)

    @property
    def goal_met(self) -> bool:
        return len(self.found) >= self.goal


def chunked(items: Sequence[T], size: int) -> List[List[T]]:
    """Split ``items`` into consecutive chunks of at most ``size`` elements."""
    if size < 1:
        raise ValueError("size must be at least 1")
    return [list(items[start : start + size]) for start in range(0, len(items), size)]


def _probe_batch(
    batch: Sequence[Relay],
    scan_config: ScanConfig,
    prober: Prober,
    on_reachable: Optional[Callable[[ProbeOutcome], None]],
) -> List[ProbeOutcome]:
    """Probe one batch concurrently and return its reachable outcomes.

    Outcomes are handed to ``on_reachable`` in completion order, on the
    calling thread.
    """
    found: List[ProbeOutcome] = []
    with ThreadPoolExecutor(max_workers=scan_config.batch_size) as executor:
        future_map = {
            executor.submit(prober, relay, scan_config.timeout): relay for relay in batch
        }
        for fut in as_completed(future_map):
            try:
                outcome = fut.result()
            except Exception as exc:  # noqa: BLE001
                LOGGER.error("Probe task failed for %s: %s", future_map[fut].fingerprint, exc)
                continue
            if not outcome.is_reachable:
                continue
            if not found:
                LOGGER.info("Reachable relays in this attempt:")
            found.append(outcome)
            if on_reachable is not None:
                on_reachable(outcome)
    return found


@perf("jobs.run_scan", tags={"component": "jobs"})
def run_scan(
    api_client: OnionooClient,
    scan_config: ScanConfig,
    on_reachable: Optional[Callable[[ProbeOutcome], None]] = None,
    *,
    prober: Prober = probe_relay,
    shuffle: Callable[[MutableSequence[Relay]], None] = random.shuffle,
) -> ScanSummary:
    """Run one scan.

    The goal is only checked between batches: a batch that is already
    running always finishes, so the number of relays found can exceed the
    goal.

    Raises:
        SourceUnavailable: If no directory source could be downloaded.
    """
    relays = api_client.fetch_relays(scan_config.extra_urls)
    LOGGER.info("Done! Found %d relays.", len(relays))

    relays = filter_by_port(relays, scan_config.ports)
    if not relays:
        LOGGER.warning("No relays selected after filtering. Check your port constraints.")
        return ScanSummary(goal=scan_config.goal, total_candidates=0, total_batches=0, batches_run=0)

    shuffle(relays)
    batches = chunked(relays, scan_config.batch_size)

    found: List[ProbeOutcome] = []
    batches_run = 0
    for index, batch in enumerate(batches, start=1):
        if len(found) >= scan_config.goal:
            break

        LOGGER.info("--- Attempt %d/%d (testing %d relays) ---", index, len(batches), len(batch))
        with perf_span(
            "jobs.batch",
            tags={"batch": index, "size": len(batch)},
            logger=LOGGER,
        ):
            batch_found = _probe_batch(batch, scan_config, prober, on_reachable)
        batches_run += 1
        if not batch_found:
            LOGGER.info("No relays were reachable in this attempt.")
        found.extend(batch_found)

    return ScanSummary(
        goal=scan_config.goal,
        total_candidates=len(relays),
        total_batches=len(batches),
        batches_run=batches_run,
        found=tuple(found),
    )


__all__ = ["ScanConfig", "ScanSummary", "chunked", "run_scan"]
