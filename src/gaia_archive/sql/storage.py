"""Persist parsed matches with SQLAlchemy Core."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, insert, select
from sqlalchemy.engine import Engine

from gaia_archive.core.results import ParsedMatch, PlayerRecord

from .engine import create_all
from .models import Match, MatchPlayer

logger = logging.getLogger(__name__)


def _match_row(match: ParsedMatch) -> dict[str, Any]:
    return {
        "match_id": match.match_id,
        "game_id": match.game_id,
        "game_name": match.game_name,
        "player_count": match.player_count,
        "winner_name": match.winner_name,
        "min_player_elo": match.min_player_elo,
        "raw": match.to_dict(),
    }


def _player_rows(match: ParsedMatch) -> list[dict[str, Any]]:
    def _row(player: PlayerRecord) -> dict[str, Any]:
        return {
            "match_id": match.match_id,
            "player_id": player.player_id,
            "player_name": player.player_name,
            "race_id": player.race_id,
            "race_name": player.race_name,
            "final_score": player.final_score,
            "rating": player.rating,
            "is_winner": player.player_name == match.winner_name,
            "buildings": [list(r) for r in player.buildings_by_round],
        }

    return [_row(p) for p in match.players]


class SqlMatchStore:
    """Match store backed by the ``matches`` and ``match_players`` tables.

    A match and all of its player rows are written in one transaction, so a
    failure leaves neither behind.
    """

    def __init__(self, engine: Engine, *, create_tables: bool = True) -> None:
        self.engine = engine
        if create_tables:
            create_all(engine)

    def exists(self, match_id: int) -> bool:
        table = Match.__table__
        stmt = select(table.c.match_id).where(table.c.match_id == int(match_id))
        with self.engine.connect() as conn:
            return conn.execute(stmt).first() is not None

    def store(self, match: ParsedMatch) -> None:
        players = _player_rows(match)
        with self.engine.begin() as conn:
            conn.execute(insert(Match.__table__), [_match_row(match)])
            if players:
                conn.execute(insert(MatchPlayer.__table__), players)
        logger.debug(
            f"Stored match {match.match_id} with {len(players)} players"
        )

    def count(self) -> int:
        """Number of stored matches."""
        stmt = select(func.count()).select_from(Match.__table__)
        with self.engine.connect() as conn:
            return int(conn.execute(stmt).scalar_one())
