"""Configuration dataclasses for the platform client and the collector."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from gaia_archive.core.constants import (
    BGA_BASE_URL,
    DEFAULT_DETAIL_DELAY,
    DEFAULT_MAX_PAGE_FAILURES,
    DEFAULT_REQUEST_DELAY,
    DEFAULT_TIMEOUT,
    GAIA_GAME_ID,
)

_LOG = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        _LOG.warning("Invalid float for %s: %r; using default=%s", name, raw, default)
        return default
    return max(value, 0.0)


def _env_int(
    name: str, default: Optional[int], minimum: Optional[int] = None
) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        _LOG.warning("Invalid int for %s: %r; using default=%s", name, raw, default)
        return default
    if minimum is not None and value < minimum:
        _LOG.warning("%s=%s is below %s; using %s", name, value, minimum, minimum)
        return minimum
    return value


@dataclass(frozen=True)
class Credentials:
    """Account identifier and secret. Never persisted."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"

    @classmethod
    def from_env(cls) -> "Credentials":
        """Read ``BGA_USERNAME`` / ``BGA_PASSWORD``.

        Raises:
            RuntimeError: If either variable is unset or empty.
        """
        username = os.getenv("BGA_USERNAME", "").strip()
        password = os.getenv("BGA_PASSWORD", "")
        if not username or not password:
            raise RuntimeError(
                "BGA_USERNAME and BGA_PASSWORD must be set (environment or .env file)."
            )
        return cls(username=username, password=password)


@dataclass(frozen=True)
class ClientConfig:
    """Settings for :class:`~gaia_archive.scraping.client.PlatformClient`."""

    base_url: str = BGA_BASE_URL
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "ClientConfig":
        return cls(
            base_url=os.getenv("GAIA_BASE_URL", BGA_BASE_URL).rstrip("/"),
            timeout=_env_float("GAIA_TIMEOUT", DEFAULT_TIMEOUT),
        )


@dataclass(frozen=True)
class CollectorConfig:
    """Settings for :class:`~gaia_archive.scraping.collector.MatchCollector`."""

    game_id: int = GAIA_GAME_ID
    request_delay: float = DEFAULT_REQUEST_DELAY
    detail_delay: float = DEFAULT_DETAIL_DELAY
    # None means no page cap
    max_pages: Optional[int] = None
    max_page_failures: int = DEFAULT_MAX_PAGE_FAILURES

    @classmethod
    def from_env(cls) -> "CollectorConfig":
        max_pages = _env_int("GAIA_MAX_PAGES", None)
        if max_pages is not None and max_pages <= 0:
            max_pages = None
        return cls(
            request_delay=_env_float("GAIA_REQUEST_DELAY", DEFAULT_REQUEST_DELAY),
            detail_delay=_env_float("GAIA_DETAIL_DELAY", DEFAULT_DETAIL_DELAY),
            max_pages=max_pages,
            max_page_failures=_env_int(
                "GAIA_MAX_PAGE_FAILURES", DEFAULT_MAX_PAGE_FAILURES, minimum=1
            ),
        )
