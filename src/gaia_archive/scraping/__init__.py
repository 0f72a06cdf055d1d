"""Board Game Arena scraping: authenticated client, pacing and collection."""

from __future__ import annotations

from gaia_archive.scraping.client import PlatformClient, extract_request_token
from gaia_archive.scraping.collector import MatchCollector
from gaia_archive.scraping.pacing import PacingPolicy
from gaia_archive.scraping.session import Session

__all__ = [
    "PlatformClient",
    "extract_request_token",
    "Session",
    "PacingPolicy",
    "MatchCollector",
]
