from __future__ import annotations

"""
Collect every finished Gaia Project match of one player.

Usage:
  poetry run gaia-collect-player AlabeSons
  poetry run gaia-collect-player 85051404 --max-pages 5

Credentials are read from BGA_USERNAME / BGA_PASSWORD (optionally via .env).
Exit codes: 0 when the history was collected, 2 when the platform's rate
limit stopped the run (run again later to continue), 1 on any other failure.
"""

import argparse
from dataclasses import replace
from typing import Optional

from gaia_archive.cli.common import (
    RULE,
    _load_env,
    build_store,
    init_runtime,
    print_stats,
)
from gaia_archive.core.config import ClientConfig, CollectorConfig, Credentials
from gaia_archive.core.errors import AuthError, GaiaArchiveError, is_rate_limited
from gaia_archive.core.results import PlayerRef, Stopped
from gaia_archive.scraping.client import PlatformClient
from gaia_archive.scraping.collector import MatchCollector


def resolve_player(client: PlatformClient, player: str) -> Optional[PlayerRef]:
    """Treat digits as a player id, anything else as a name to search for."""
    if player.isdigit():
        player_id = int(player)
        return PlayerRef(player_id=player_id, name=f"Player {player_id}")

    print(f"Searching for player: {player}")
    results = client.search_player(player)
    if not results:
        return None
    first = results[0]
    print(f"Found player: {first.name} (ID: {first.player_id})")
    if len(results) > 1:
        print("Multiple matches found (using first match):")
        for i, ref in enumerate(results[:5], start=1):
            print(f"   {i}. {ref.name} (ID: {ref.player_id})")
    return first


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Collect a player's finished Gaia Project matches"
    )
    parser.add_argument("player", help="Player name or numeric player id")
    parser.add_argument(
        "--dotenv",
        type=str,
        default=".env",
        help="Path to .env with credentials and DB settings (default: .env)",
    )
    parser.add_argument(
        "--db-url",
        type=str,
        default=None,
        help="Database URL (overrides env)",
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        default=None,
        help="Stop after this many history pages",
    )
    args = parser.parse_args(argv)

    _load_env(args.dotenv)
    init_runtime("gaia_collect_player")

    try:
        credentials = Credentials.from_env()
    except RuntimeError as e:
        print(f"Error: {e}")
        return 1

    config = CollectorConfig.from_env()
    if args.max_pages is not None:
        config = replace(config, max_pages=args.max_pages)

    print(RULE)
    print("BGA Gaia Project - Player Collection")
    print(RULE)

    with PlatformClient(ClientConfig.from_env()) as client:
        try:
            client.authenticate(credentials.username, credentials.password)
        except AuthError as e:
            print(f"Login failed: {e}")
            return 1
        print("Logged in successfully")

        try:
            player = resolve_player(client, args.player)
        except GaiaArchiveError as e:
            print(f"Player search failed: {e}")
            return 2 if is_rate_limited(e) else 1
        if player is None:
            print(f'Player "{args.player}" not found')
            print("Check the player name or provide the numeric player id instead.")
            return 1

        store = build_store(args.db_url)
        collector = MatchCollector(client, store, config=config, on_progress=print)
        outcome = collector.collect_player(player.player_id, player.name)

    print("\n" + RULE)
    print("Collection Summary")
    print(RULE)
    print_stats(outcome.stats)
    print("\n" + RULE)
    if isinstance(outcome, Stopped):
        print("Collection paused (rate limited). Run again to continue.")
        print(RULE)
        return 2
    print("Collection complete!")
    print(RULE)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
