from __future__ import annotations

"""
Collect finished matches for the best-ranked Gaia Project players.

Usage:
  poetry run gaia-collect-top
  poetry run gaia-collect-top --count 25 --mode elo

Players are processed one after another; a rate-limit answer from the
platform stops the whole run (exit code 2) and the remaining players are
left for the next invocation.
"""

import argparse

from gaia_archive.cli.common import (
    RULE,
    _load_env,
    build_store,
    init_runtime,
    print_stats,
)
from gaia_archive.core.config import ClientConfig, CollectorConfig, Credentials
from gaia_archive.core.constants import DEFAULT_RANKING_MODE, DEFAULT_TOP_PLAYERS
from gaia_archive.core.errors import AuthError, GaiaArchiveError, is_rate_limited
from gaia_archive.core.results import CollectionRun, PlayerRef
from gaia_archive.scraping.client import PlatformClient
from gaia_archive.scraping.collector import MatchCollector


def fetch_top_players(
    client: PlatformClient, count: int, game_id: int, mode: str
) -> list[PlayerRef]:
    """Read ranking pages until ``count`` players are known or the board ends."""
    players: list[PlayerRef] = []
    while len(players) < count:
        page = client.fetch_ranking(game_id, len(players), mode)
        if not page:
            break
        players.extend(page)
    return players[:count]


def print_run_summary(run: CollectionRun, attempted_of: int) -> None:
    print("\n" + RULE)
    print("Collection Summary")
    print(RULE)
    for stats in run.stats:
        print_stats(stats)

    print("\n" + RULE)
    print(
        "Collection paused (rate limited)" if run.stopped else "Collection complete!"
    )
    print(f"   Total new games: {run.total_new}")
    print(f"   Total skipped: {run.total_skipped}")
    print(f"   Total failed: {run.total_failed}")
    not_attempted = attempted_of - len(run.outcomes)
    if not_attempted > 0:
        print(f"   Players not attempted: {not_attempted}")
    if run.stopped:
        print("\n   Run again later to continue collecting.")
    print(RULE)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Collect finished matches for the top-ranked players"
    )
    parser.add_argument(
        "--count",
        type=int,
        default=DEFAULT_TOP_PLAYERS,
        help=f"Number of top players to collect (default: {DEFAULT_TOP_PLAYERS})",
    )
    parser.add_argument(
        "--mode",
        type=str,
        default=DEFAULT_RANKING_MODE,
        help="Ranking board mode (default: elo)",
    )
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
    args = parser.parse_args(argv)

    _load_env(args.dotenv)
    init_runtime("gaia_collect_top")

    try:
        credentials = Credentials.from_env()
    except RuntimeError as e:
        print(f"Error: {e}")
        return 1

    config = CollectorConfig.from_env()

    print(RULE)
    print("BGA Gaia Project - Top Players Collection")
    print(RULE)

    with PlatformClient(ClientConfig.from_env()) as client:
        try:
            client.authenticate(credentials.username, credentials.password)
        except AuthError as e:
            print(f"Login failed: {e}")
            return 1
        print("Logged in successfully")

        print(f"\nFetching top {args.count} players by {args.mode}...")
        try:
            top_players = fetch_top_players(
                client, max(args.count, 0), config.game_id, args.mode
            )
        except GaiaArchiveError as e:
            print(f"Ranking fetch failed: {e}")
            return 2 if is_rate_limited(e) else 1
        if not top_players:
            print("The ranking board is empty")
            return 1
        for i, ref in enumerate(top_players, start=1):
            print(f"   {i}. {ref.name} (ID: {ref.player_id})")

        store = build_store(args.db_url)
        collector = MatchCollector(client, store, config=config, on_progress=print)
        run = collector.collect_players(top_players)

    print_run_summary(run, len(top_players))
    return 2 if run.stopped else 0


if __name__ == "__main__":
    raise SystemExit(main())
