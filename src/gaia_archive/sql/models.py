from __future__ import annotations

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB

from .constants import MATCH_PLAYERS_TABLE, MATCHES_TABLE, SCHEMA, qualified
from .engine import Base

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JsonType = JSON().with_variant(JSONB(), "postgresql")


class Match(Base):
    __tablename__ = MATCHES_TABLE
    __table_args__ = (
        Index("ix_matches_game_id", "game_id"),
        {"schema": SCHEMA},
    )

    match_id = Column(BigInteger, primary_key=True, autoincrement=False)
    game_id = Column(Integer, nullable=True)
    game_name = Column(String, nullable=True)
    player_count = Column(Integer, nullable=False)
    winner_name = Column(String, nullable=False)
    min_player_elo = Column(Integer, nullable=True)
    raw = Column(JsonType, nullable=True)  # full parsed match


class MatchPlayer(Base):
    __tablename__ = MATCH_PLAYERS_TABLE
    __table_args__ = (
        UniqueConstraint(
            "match_id", "player_id", name="uq_match_players_match_player"
        ),
        Index("ix_match_players_player_id", "player_id"),
        Index("ix_match_players_race_id", "race_id"),
        {"schema": SCHEMA},
    )

    id = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    match_id = Column(
        BigInteger,
        ForeignKey(f"{qualified(MATCHES_TABLE)}.match_id", ondelete="CASCADE"),
        nullable=False,
    )
    player_id = Column(BigInteger, nullable=False)
    player_name = Column(String, nullable=False)
    race_id = Column(Integer, nullable=True)
    race_name = Column(String, nullable=False)
    final_score = Column(Integer, nullable=False, default=0)
    rating = Column(Integer, nullable=True)
    is_winner = Column(Boolean, nullable=False, default=False)
    buildings = Column(JsonType, nullable=True)  # list of building ids per round
