"""Shared pytest fixtures for the relay_scanner tests.

Provides reusable fakes and configuration objects so that no test touches the
real directory service or opens real connections.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

import pytest

from relay_scanner.config import AppConfig
from relay_scanner.transform import Relay


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    """Application config fixture logging into a temporary directory."""
    return AppConfig(
        log_directory=tmp_path,
        log_level="INFO",
    )


@pytest.fixture(autouse=True)
def reset_root_logging() -> Generator[None, None, None]:
    """Restore root handlers replaced by ``configure_logging``."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


class DummyResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, json_error: Optional[Exception] = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self._json_error = json_error

    def json(self) -> Any:
        if self._json_error is not None:
            raise self._json_error
        return self._payload


class FakeSession:
    """Session stub answering per URL with a response or an exception."""

    def __init__(self, responses: Dict[str, Any]) -> None:
        self._responses = responses
        self.requested: List[str] = []
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def get(self, url: str, **kwargs: Any) -> DummyResponse:
        self.requested.append(url)
        self.calls.append(kwargs)
        outcome = self._responses.get(url, DummyResponse(404))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self) -> None:
        self.closed = True


class FakeApiClient:
    def __init__(self, relays: List[Relay]) -> None:
        self.relays = relays
        self.extra_urls = None

    def fetch_relays(self, extra_urls=()) -> List[Relay]:
        self.extra_urls = tuple(extra_urls)
        return list(self.relays)


def make_relay(fingerprint: str, *addresses: str) -> Relay:
    return Relay(fingerprint=fingerprint, or_addresses=tuple(addresses))
