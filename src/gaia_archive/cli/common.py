"""Helpers shared by the collection command-line entry points."""

from __future__ import annotations

import logging
import os
from typing import Optional

from gaia_archive.core.logging import setup_logging
from gaia_archive.core.results import CollectionStats
from gaia_archive.core.sentry import init_sentry
from gaia_archive.sql import SqlMatchStore, create_engine

RULE = "=" * 70


def _load_env(dotenv: Optional[str]) -> None:
    if dotenv and os.path.exists(dotenv):
        try:
            with open(dotenv, "r") as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith("#") or "=" not in line:
                        continue
                    k, v = line.split("=", 1)
                    k = k.strip()
                    v = v.strip().strip('"').strip("'")
                    os.environ.setdefault(k, v)
        except OSError as e:
            logging.getLogger(__name__).warning(f"Could not read {dotenv}: {e}")


def init_runtime(context: str) -> None:
    """Initialize logging and Sentry as early as possible."""
    try:
        lvl = os.getenv("GAIA_LOG_LEVEL", "INFO")
        fmt = os.getenv("GAIA_LOG_FORMAT", "simple")
        setup_logging(level=lvl, format_style=fmt)
    except (ValueError, TypeError, OSError):
        logging.basicConfig(level=logging.INFO)
    init_sentry(context=context, release=os.getenv("GAIA_BUILD"))


def build_store(db_url: Optional[str]) -> SqlMatchStore:
    return SqlMatchStore(create_engine(db_url))


def print_stats(stats: CollectionStats) -> None:
    print(f"\n{stats.player_name} (ID: {stats.player_id})")
    print(f"   Total games found: {stats.total_games}")
    print(f"   New games stored: {stats.new_games}")
    print(f"   Already existed: {stats.skipped_games}")
    print(f"   Failed: {stats.failed_games}")
    if stats.rate_limited:
        print("   Stopped early due to the platform rate limit.")
    if stats.errors:
        print("   Errors:")
        for err in stats.errors:
            print(f"     - Game {err.match_id}: {err.error}")
