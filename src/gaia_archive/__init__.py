"""Board Game Arena Gaia Project match archive."""

from __future__ import annotations

# Core functionality - Main API
from gaia_archive.core import parse_match_log

# Key constants for convenience
from gaia_archive.core.constants import GAIA_GAME_ID, PAGE_SIZE
from gaia_archive.core.results import (
    CollectionRun,
    Completed,
    ParsedMatch,
    Stopped,
)
from gaia_archive.scraping import MatchCollector, PacingPolicy, PlatformClient
from gaia_archive.sql import SqlMatchStore

__version__ = "0.1.0"

__all__ = [
    # Parsing
    "parse_match_log",
    "ParsedMatch",
    # Collection
    "PlatformClient",
    "MatchCollector",
    "PacingPolicy",
    "Completed",
    "Stopped",
    "CollectionRun",
    # Storage
    "SqlMatchStore",
    # Constants
    "GAIA_GAME_ID",
    "PAGE_SIZE",
]
