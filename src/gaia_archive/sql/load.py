from __future__ import annotations

from typing import Any, Optional

import pandas as pd
import polars as pl
from sqlalchemy import text
from sqlalchemy.engine import Engine

from gaia_archive.core.vocabulary import RACE_NAME_TO_ID

from .constants import MATCH_PLAYERS_TABLE, MATCHES_TABLE, qualified


def _read_sql(
    engine: Engine, sql: str, params: Optional[dict[str, Any]] = None
) -> pl.DataFrame:
    """Read SQL into a Polars DataFrame via pandas."""
    with engine.connect() as conn:
        pdf = pd.read_sql_query(text(sql), conn, params=params)
    return pl.from_pandas(pdf) if not pdf.empty else pl.DataFrame([])


def _cast_ints(df: pl.DataFrame, cols: list[str]) -> pl.DataFrame:
    cast_map = [
        pl.col(c).cast(pl.Int64, strict=False) for c in cols if c in df.columns
    ]
    return df.with_columns(cast_map) if cast_map else df


def _resolve_race(race: int | str | None) -> Optional[int]:
    if race is None:
        return None
    if isinstance(race, int):
        return race
    key = race.strip().lower()
    for name, race_id in RACE_NAME_TO_ID.items():
        if name.lower() == key:
            return race_id
    raise ValueError(f"Unknown race: {race!r}")


def load_matches_df(
    engine: Engine,
    *,
    min_elo: Optional[int] = None,
    player_count: Optional[int] = None,
) -> pl.DataFrame:
    """Load stored matches as a Polars DataFrame.

    Columns: match_id, game_id, game_name, player_count, winner_name,
    min_player_elo. The raw parsed blob is not loaded.
    """
    where = []
    params: dict[str, Any] = {}
    if min_elo is not None:
        where.append("m.min_player_elo >= :min_elo")
        params["min_elo"] = int(min_elo)
    if player_count is not None:
        where.append("m.player_count = :player_count")
        params["player_count"] = int(player_count)
    where_clause = f"WHERE {' AND '.join(where)}" if where else ""

    sql = f"""
        SELECT
            m.match_id,
            m.game_id,
            m.game_name,
            m.player_count,
            m.winner_name,
            m.min_player_elo
        FROM {qualified(MATCHES_TABLE)} m
        {where_clause}
        ORDER BY m.match_id
    """

    df = _read_sql(engine, sql, params)
    if df.is_empty():
        return df
    return _cast_ints(
        df, ["match_id", "game_id", "player_count", "min_player_elo"]
    )


def load_match_players_df(
    engine: Engine,
    *,
    race: int | str | None = None,
    player_id: Optional[int] = None,
) -> pl.DataFrame:
    """Load per-player match rows, optionally filtered by race or player.

    ``race`` accepts a race id or a display name such as ``"Terrans"``.
    Per-round buildings stay in the database; use the raw blob for them.
    """
    where = []
    params: dict[str, Any] = {}
    race_id = _resolve_race(race)
    if race_id is not None:
        where.append("p.race_id = :race_id")
        params["race_id"] = race_id
    if player_id is not None:
        where.append("p.player_id = :player_id")
        params["player_id"] = int(player_id)
    where_clause = f"WHERE {' AND '.join(where)}" if where else ""

    sql = f"""
        SELECT
            p.match_id,
            p.player_id,
            p.player_name,
            p.race_id,
            p.race_name,
            p.final_score,
            p.rating,
            p.is_winner,
            m.min_player_elo
        FROM {qualified(MATCH_PLAYERS_TABLE)} p
        JOIN {qualified(MATCHES_TABLE)} m ON m.match_id = p.match_id
        {where_clause}
        ORDER BY p.match_id, p.player_id
    """

    df = _read_sql(engine, sql, params)
    if df.is_empty():
        return df
    df = _cast_ints(
        df,
        [
            "match_id",
            "player_id",
            "race_id",
            "final_score",
            "rating",
            "min_player_elo",
        ],
    )
    if "is_winner" in df.columns:
        df = df.with_columns(pl.col("is_winner").cast(pl.Boolean, strict=False))
    return df
