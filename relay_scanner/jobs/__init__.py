"""Scan orchestration."""

from relay_scanner.jobs.runner import ScanConfig, ScanSummary, chunked, run_scan

__all__ = ["ScanConfig", "ScanSummary", "chunked", "run_scan"]
