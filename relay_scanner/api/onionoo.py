"""Client for the Onionoo relay ``details`` document and its mirrors.

The primary Onionoo endpoint is tried first, then any caller-supplied mirrors,
then two community-run mirrors. The first source that answers with a 2xx
status and a well-formed document wins.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlsplit

import requests

from relay_scanner.logging_utils import perf
from relay_scanner.transform import Relay, extract_relays

LOGGER = logging.getLogger(__name__)

PRIMARY_URL = (
    "https://onionoo.torproject.org/details"
    "?type=relay&running=true&fields=fingerprint,or_addresses,country"
)
MIRROR_URLS = (
    "https://raw.githubusercontent.com/nukeddd/tor-onionoo-mirror/refs/heads/master/"
    "details-running-relays-fingerprint-address-only.json",
    "https://bitbucket.org/ValdikSS/tor-onionoo-mirror/raw/master/"
    "details-running-relays-fingerprint-address-only.json",
)
HEADERS = {"user-agent": "relay-scanner/0.3", "accept": "application/json"}


class SourceUnavailable(RuntimeError):
    """Raised when no directory source produced a usable relay list."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = list(errors)
        super().__init__("Tor relay information can't be downloaded from any source")


def source_urls(extra_urls: Iterable[str] = ()) -> List[str]:
    """Return the ordered list of sources to try."""
    return [PRIMARY_URL, *extra_urls, *MIRROR_URLS]


def _mask_proxy(proxy: str) -> str:
    """Drop credentials from a proxy URL before it is logged."""
    parts = urlsplit(proxy)
    if parts.hostname is None:
        return "unknown"
    port = f":{parts.port}" if parts.port else ""
    return f"{parts.scheme}://{parts.hostname}{port}"


class OnionooClient:
    """Downloads relay lists from Onionoo-compatible sources."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
        proxy: Optional[str] = None,
    ) -> None:
        """Initialize the API client.

        Args:
            session: Optional pre-configured Requests session.
            timeout: Per-request timeout in seconds.
            proxy: Optional proxy URL (``http://``, ``socks5h://`` ...) used for
                both plain and TLS traffic. If None, requests use direct network.
        """
        self._session = session or requests.Session()
        self._timeout = timeout
        self._proxies: Optional[Dict[str, str]] = (
            {"http": proxy, "https": proxy} if proxy else None
        )
        if proxy:
            LOGGER.debug("Directory downloads routed via proxy=%s", _mask_proxy(proxy))

    def fetch_details(self, url: str) -> Dict[str, Any]:
        """Download one ``details`` document.

        Raises:
            requests.RequestException: On transport failure or a non-2xx status.
            ValueError: If the body is not valid JSON.
        """
        response = self._session.get(
            url,
            headers=HEADERS,
            timeout=self._timeout,
            proxies=self._proxies,
        )
        if not 200 <= response.status_code < 300:
            raise requests.HTTPError(f"Status {response.status_code}", response=response)
        try:
            return response.json()
        except ValueError as exc:
            # requests.JSONDecodeError is also a RequestException.
            raise ValueError(f"Invalid JSON: {exc}") from exc

    @perf("api.fetch_relays", tags={"component": "api"})
    def fetch_relays(self, extra_urls: Iterable[str] = ()) -> List[Relay]:
        """Return the relay list from the first source that works.

        Raises:
            SourceUnavailable: If every source failed.
        """
        errors: List[str] = []
        for url in source_urls(extra_urls):
            LOGGER.info("Trying to download from %s...", url)
            try:
                relays = extract_relays(self.fetch_details(url))
            except requests.RequestException as exc:
                LOGGER.warning("-> Failed to download from %s: %s", url, exc)
                errors.append(f"{url}: {exc}")
                continue
            except ValueError as exc:
                LOGGER.warning("-> Failed to parse JSON from %s: %s", url, exc)
                errors.append(f"{url}: {exc}")
                continue

            LOGGER.info("-> Downloaded %d relays from %s", len(relays), url)
            return relays

        raise SourceUnavailable(errors)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "OnionooClient":
        return self

    def __exit__(self, exc_type, exc, exc_tb) -> None:
        self.close()


__all__ = [
    "MIRROR_URLS",
    "OnionooClient",
    "PRIMARY_URL",
    "SourceUnavailable",
    "source_urls",
]
