"""SQL storage for collected Gaia Project matches.

This package defines:
- Schema constants (configurable via env)
- SQLAlchemy models for the ``matches`` and ``match_players`` tables
- Engine helpers and the transactional match store
- Loaders that return Polars DataFrames

Environment variables:
- GAIA_DB_SCHEMA: optional schema name (Postgres only)
- GAIA_DATABASE_URL or DATABASE_URL: SQLAlchemy URL for the DB engine
"""

from __future__ import annotations

from gaia_archive.sql import models
from gaia_archive.sql.constants import SCHEMA
from gaia_archive.sql.engine import Base, create_all, create_engine
from gaia_archive.sql.load import load_match_players_df, load_matches_df
from gaia_archive.sql.models import Match, MatchPlayer
from gaia_archive.sql.storage import SqlMatchStore

__all__ = [
    "SCHEMA",
    "models",
    "Base",
    "create_engine",
    "create_all",
    "Match",
    "MatchPlayer",
    "SqlMatchStore",
    "load_matches_df",
    "load_match_players_df",
]
