"""Configuration utilities for relay scanning runs.

This module reads environment variables (optionally from an `.env` file) and
produces an application configuration object consumed by the CLI and the
logging setup.

Supported keys: `LOG_DIR`, `LOG_LEVEL`, `APP_NAME`, `RELAY_SOURCE_URLS`
(comma-separated extra directory mirrors) and `RELAY_PROXY` (outbound proxy
for the directory download, e.g. `socks5h://127.0.0.1:9050`).

Usage example:

    from relay_scanner.config import load_config

    config = load_config()
    configure_logging(config)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, MutableMapping, Optional, Tuple

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_ENV_FILE = REPO_ROOT / ".env"


def _load_env_file(path: Path) -> Dict[str, str]:
    """Parse a dotenv-style file into a dictionary."""
    if not path.exists():
        return {}

    data: Dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        data[key.strip()] = value.strip().strip("\"'")
    return data


def _merge_envs(dotenv_values: Mapping[str, str], env: MutableMapping[str, str]) -> Dict[str, str]:
    """Merge dotenv values with the current environment, preferring os.environ."""
    merged = dict(dotenv_values)
    merged.update(env)  # os.environ wins
    return merged


def _split_urls(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def load_environment(env_file: Optional[Path] = None) -> Dict[str, str]:
    """Return the dotenv file values overlaid with the process environment."""
    target_file = env_file or DEFAULT_ENV_FILE
    return _merge_envs(_load_env_file(target_file), os.environ)


@dataclass(frozen=True)
class AppConfig:
    """Application-level configuration values."""

    log_directory: Optional[Path]
    log_level: str
    app_name: str = "relay-scanner"
    source_urls: Tuple[str, ...] = field(default_factory=tuple)
    proxy: Optional[str] = None


def load_config(env_file: Optional[Path] = None) -> AppConfig:
    """Load configuration values using environment defaults.

    Raises:
        ValueError: If ``LOG_LEVEL`` does not name a standard logging level.
    """
    merged = load_environment(env_file)

    log_directory: Optional[Path] = None
    raw_log_dir = merged.get("LOG_DIR", "").strip()
    if raw_log_dir:
        log_directory = Path(raw_log_dir)
        if not log_directory.is_absolute():
            log_directory = REPO_ROOT / log_directory

    log_level = merged.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ValueError(f"Unsupported LOG_LEVEL: {log_level}")

    return AppConfig(
        log_directory=log_directory,
        log_level=log_level,
        app_name=merged.get("APP_NAME", "relay-scanner"),
        source_urls=_split_urls(merged.get("RELAY_SOURCE_URLS")),
        proxy=merged.get("RELAY_PROXY") or None,
    )


__all__ = ["AppConfig", "load_config", "load_environment", "REPO_ROOT"]
