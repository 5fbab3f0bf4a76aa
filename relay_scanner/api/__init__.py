"""Directory service clients."""

from relay_scanner.api.onionoo import (
    MIRROR_URLS,
    PRIMARY_URL,
    OnionooClient,
    SourceUnavailable,
    source_urls,
)

__all__ = [
    "MIRROR_URLS",
    "PRIMARY_URL",
    "OnionooClient",
    "SourceUnavailable",
    "source_urls",
]
