"""
Incremental collection of a player's finished Gaia Project matches.

The collector walks a player's history page by page, skips matches the store
already has before spending any request on them, and fetches, parses and
stores the rest. Every call is made sequentially with a fixed pause in
between; concurrent requests would only trip the platform's limiter sooner.

A rate-limit answer from the platform ends the player's run (and a
multi-player run) with a :class:`~gaia_archive.core.results.Stopped` outcome
that carries the statistics gathered so far. Any other per-match failure is
recorded and the run moves on.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from gaia_archive.core.config import CollectorConfig
from gaia_archive.core.constants import PAGE_SIZE
from gaia_archive.core.errors import NotAuthenticated, is_rate_limited
from gaia_archive.core.logging import log_timing
from gaia_archive.core.parser import parse_match_log
from gaia_archive.core.protocols import MatchStore, ProgressSink
from gaia_archive.core.results import (
    CollectionOutcome,
    CollectionRun,
    CollectionStats,
    Completed,
    MatchSummary,
    ParsedMatch,
    PlayerRef,
    Stopped,
)
from gaia_archive.scraping.client import PlatformClient
from gaia_archive.scraping.pacing import PacingPolicy

logger = logging.getLogger(__name__)

RATE_LIMIT_REASON = "rate limited by platform"


class MatchCollector:
    """Drive the platform client and parser across a player's history.

    Parameters
    ----------
    client : PlatformClient
        Authenticated client
    store : MatchStore
        Persistence collaborator (``exists`` / ``store``)
    pacing : PacingPolicy, optional
        Delays between calls; defaults to the configured fixed delays
    config : CollectorConfig, optional
        Game id, page cap and page-failure cap
    on_progress : callable, optional
        Receives human-readable progress lines; defaults to INFO logging
    """

    def __init__(
        self,
        client: PlatformClient,
        store: MatchStore,
        pacing: PacingPolicy | None = None,
        config: CollectorConfig | None = None,
        on_progress: ProgressSink | None = None,
        parser: Callable[..., ParsedMatch] = parse_match_log,
    ) -> None:
        self.client = client
        self.store = store
        self.config = config or CollectorConfig()
        self.pacing = pacing or PacingPolicy.from_config(self.config)
        self.on_progress = on_progress or logger.info
        self.parser = parser

    def _progress(self, message: str) -> None:
        self.on_progress(message)

    def _within_page_cap(self, page: int) -> bool:
        return self.config.max_pages is None or page <= self.config.max_pages

    def collect_player(
        self, player_id: int, player_name: str | None = None
    ) -> CollectionOutcome:
        """Collect every finished match of one player that is not yet stored.

        Returns:
            ``Completed`` when the history was exhausted (or a cap was reached),
            ``Stopped`` when the platform's rate limit ended the run early.
        """
        stats = CollectionStats(
            player_id=player_id, player_name=player_name or f"Player {player_id}"
        )
        self._progress(
            f"Collecting games for {stats.player_name} (ID: {player_id})"
        )

        with log_timing(logger, f"collection for player {player_id}"):
            outcome = self._walk_history(stats)

        if isinstance(outcome, Stopped):
            self._progress(
                f"Stopped collecting {stats.player_name}: {outcome.reason}"
            )
        return outcome

    def _walk_history(self, stats: CollectionStats) -> CollectionOutcome:
        page = 1
        consecutive_page_failures = 0

        while self._within_page_cap(page):
            self._progress(f"Fetching page {page}...")
            try:
                summaries = self.client.list_finished_matches(
                    stats.player_id, self.config.game_id, page
                )
            except NotAuthenticated:
                raise
            except Exception as e:
                error = str(e)
                stats.page_errors.append((page, error))
                if is_rate_limited(e):
                    stats.rate_limited = True
                    return Stopped(stats=stats, reason=RATE_LIMIT_REASON)

                consecutive_page_failures += 1
                logger.warning(f"Failed to fetch page {page}: {error}")
                self._progress(f"Failed to fetch page {page}: {error}")
                if consecutive_page_failures >= self.config.max_page_failures:
                    self._progress(
                        f"Too many page fetch errors ({consecutive_page_failures}), "
                        "stopping"
                    )
                    break
                self.pacing.after_request()
                page += 1
                continue

            self.pacing.after_request()
            consecutive_page_failures = 0
            stats.pages_fetched += 1

            if not summaries:
                self._progress("No more games (reached end)")
                break

            self._progress(f"Found {len(summaries)} games on page {page}")
            stats.total_games += len(summaries)

            for summary in summaries:
                if not self._collect_match(summary, stats):
                    return Stopped(stats=stats, reason=RATE_LIMIT_REASON)

            if len(summaries) < PAGE_SIZE:
                self._progress(f"Reached last page ({len(summaries)} games)")
                break

            page += 1

        return Completed(stats=stats)

    def _collect_match(self, summary: MatchSummary, stats: CollectionStats) -> bool:
        """Fetch, parse and store one match.

        Returns False only when the platform's rate limit was hit.
        """
        match_id = summary.match_id

        try:
            if self.store.exists(match_id):
                self._progress(f"Game {match_id} already exists (skipping)")
                stats.skipped_games += 1
                return True

            self._progress(f"Fetching game {match_id}...")
            log = self.client.fetch_match_log(match_id)
            self.pacing.between_log_and_detail()
            detail = self.client.fetch_match_detail(match_id)

            parsed = self.parser(summary, log, detail)
            self.store.store(parsed)
        except NotAuthenticated:
            raise
        except Exception as e:
            error = str(e)
            stats.record_failure(match_id, error)
            if is_rate_limited(e):
                stats.rate_limited = True
                logger.warning(f"Rate limited while fetching game {match_id}")
                return False
            logger.error(f"Failed to process game {match_id}: {error}")
            self._progress(f"Failed to process game {match_id}: {error}")
            self.pacing.after_request()
            return True

        stats.new_games += 1
        self._progress(f"Stored game {match_id}")
        self.pacing.after_request()
        return True

    def collect_players(self, players: Iterable[PlayerRef]) -> CollectionRun:
        """Collect several players one after another.

        Stops at the first player whose run was cut short by the rate limit;
        that player's partial outcome is included.
        """
        run = CollectionRun()
        for player in players:
            outcome = self.collect_player(player.player_id, player.name)
            run.outcomes.append(outcome)
            if isinstance(outcome, Stopped):
                break
        return run
