"""
Gaia Project game-log parser.

Replays a decoded BGA match log and reduces it, together with the match's
history row, into one :class:`~gaia_archive.core.results.ParsedMatch`.
"""

from __future__ import annotations

import logging

from gaia_archive.core.events import (
    Built,
    GameStateChanged,
    RaceChosen,
    RawMatchLog,
    RoundEnded,
    Upgraded,
)
from gaia_archive.core.results import (
    MatchDetail,
    MatchSummary,
    ParsedMatch,
    PlayerRecord,
)
from gaia_archive.core.vocabulary import get_building_name, get_race_name

logger = logging.getLogger(__name__)


def _find_player(
    players: list[PlayerRecord], player_id: int | None
) -> PlayerRecord | None:
    if player_id is None:
        return None
    for player in players:
        if player.player_id == player_id:
            return player
    return None


def determine_winner(players: list[PlayerRecord]) -> str:
    """Name of the first player holding the highest final score.

    Returns an empty string when there are no players.
    """
    winner: PlayerRecord | None = None
    for player in players:
        if winner is None or player.final_score > winner.final_score:
            winner = player
    return winner.player_name if winner is not None else ""


def parse_match_log(
    summary: MatchSummary,
    log: RawMatchLog,
    detail: MatchDetail | None = None,
) -> ParsedMatch:
    """Fold a match log into a normalized match record.

    The fold is strictly left to right over packets (already ordered by packet
    id) and the events inside each packet. Round attribution depends on having
    seen every earlier round-end event, so the order must never change.

    Args:
        summary: History row for the match; ids and game name are copied as-is.
        log: Decoded match log.
        detail: Optional table details used to attach player ratings.

    Returns:
        The parsed match. Events naming players without a race selection are
        skipped rather than raising.
    """
    players: list[PlayerRecord] = []
    current_round = 0

    for packet, event in log.iter_events():
        if isinstance(event, RoundEnded):
            current_round += 1
            logger.debug(
                f"Round {current_round} ended at packet {packet.packet_id}"
            )

        elif isinstance(event, RaceChosen):
            if event.player_id is None:
                continue
            if _find_player(players, event.player_id) is not None:
                logger.debug(
                    f"Duplicate race selection for player {event.player_id} ignored"
                )
                continue
            players.append(
                PlayerRecord(
                    player_id=event.player_id,
                    player_name=event.player_name or f"Player {event.player_id}",
                    race_id=event.race_id,
                    race_name=get_race_name(event.race_id),
                )
            )

        elif isinstance(event, GameStateChanged):
            if event.results is None:
                continue
            for result in event.results:
                player = _find_player(players, result.player_id)
                if player is None or result.score is None:
                    continue
                player.final_score = result.score

        elif isinstance(event, (Built, Upgraded)):
            if event.building_id is None:
                continue
            player = _find_player(players, event.player_id)
            if player is None:
                continue
            player.add_building(current_round, event.building_id)
            logger.debug(
                f"{player.player_name} built {get_building_name(event.building_id)} "
                f"in round {current_round}"
            )

    min_player_elo = None
    if detail is not None:
        for player in players:
            player.rating = detail.rating_for(player.player_id)
        ratings = [p.rating for p in players if p.rating is not None]
        min_player_elo = min(ratings) if ratings else None

    return ParsedMatch(
        match_id=summary.match_id,
        game_id=summary.game_id,
        game_name=summary.game_name,
        player_count=len(players),
        winner_name=determine_winner(players),
        players=players,
        min_player_elo=min_player_elo,
    )
