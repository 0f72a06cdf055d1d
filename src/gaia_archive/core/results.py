"""Value types passed between the client, parser, collector and storage."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Union

from gaia_archive.core.constants import ELO_OFFSET


def _coerce_int(v: Any) -> int | None:
    try:
        if v is None or v == "":
            return None
        return int(float(v))
    except (TypeError, ValueError):
        return None


def _split_field(value: Any) -> list[str]:
    """History rows carry per-player values as lists or comma-joined strings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    text = str(value)
    if text == "":
        return []
    return [part.strip() for part in text.split(",")]


def normalize_rating(raw: Any) -> int | None:
    """Convert the platform's stored rating to its displayed value."""
    try:
        if raw is None or raw == "":
            return None
        return int(round(float(raw))) - ELO_OFFSET
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class MatchSummary:
    """One row of a player's finished-games page."""

    match_id: int
    game_id: int | None
    game_name: str | None
    player_ids: tuple[int | None, ...] = ()
    player_names: tuple[str, ...] = ()
    scores: tuple[int | None, ...] = ()
    ranks: tuple[int | None, ...] = ()
    start: int | None = None
    end: int | None = None
    elo_deltas: tuple[int | None, ...] = ()

    @classmethod
    def from_payload(cls, row: dict) -> "MatchSummary":
        """Build a summary from a ``data.tables`` entry.

        Raises:
            ValueError: If the row has no usable ``table_id``.
        """
        match_id = _coerce_int(row.get("table_id"))
        if match_id is None:
            raise ValueError(f"History row without table_id: {row!r}")
        return cls(
            match_id=match_id,
            game_id=_coerce_int(row.get("game_id")),
            game_name=row.get("game_name"),
            player_ids=tuple(_coerce_int(p) for p in _split_field(row.get("players"))),
            player_names=tuple(_split_field(row.get("player_names"))),
            scores=tuple(_coerce_int(s) for s in _split_field(row.get("scores"))),
            ranks=tuple(_coerce_int(r) for r in _split_field(row.get("ranks"))),
            start=_coerce_int(row.get("start")),
            end=_coerce_int(row.get("end")),
            elo_deltas=tuple(_coerce_int(e) for e in _split_field(row.get("elo_win"))),
        )


@dataclass(frozen=True)
class ParticipantDetail:
    player_id: int
    name: str | None
    rating: int | None


@dataclass(frozen=True)
class MatchDetail:
    """Per-participant data only available from the table page."""

    match_id: int
    participants: dict[int, ParticipantDetail] = field(default_factory=dict)

    def rating_for(self, player_id: int) -> int | None:
        participant = self.participants.get(player_id)
        return participant.rating if participant else None


@dataclass(frozen=True)
class PlayerRef:
    """A player found through search or the ranking board."""

    player_id: int
    name: str
    rating: int | None = None


@dataclass
class PlayerRecord:
    """Normalized per-player facts for one match."""

    player_id: int
    player_name: str
    race_id: int | None
    race_name: str
    final_score: int = 0
    rating: int | None = None
    buildings_by_round: list[list[int]] = field(default_factory=list)

    def add_building(self, round_index: int, building_id: int) -> None:
        """Record a building in ``round_index``, padding skipped rounds.

        Rounds before ``round_index`` are only ever padded with empty lists,
        never modified.
        """
        while len(self.buildings_by_round) <= round_index:
            self.buildings_by_round.append([])
        self.buildings_by_round[round_index].append(building_id)


@dataclass
class ParsedMatch:
    match_id: int
    game_id: int | None
    game_name: str | None
    player_count: int
    winner_name: str
    players: list[PlayerRecord] = field(default_factory=list)
    min_player_elo: int | None = None

    def get_player(self, player_id: int) -> PlayerRecord | None:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MatchError:
    match_id: int
    error: str


@dataclass
class CollectionStats:
    """Running totals for one player's collection run."""

    player_id: int
    player_name: str
    total_games: int = 0
    new_games: int = 0
    skipped_games: int = 0
    failed_games: int = 0
    rate_limited: bool = False
    pages_fetched: int = 0
    errors: list[MatchError] = field(default_factory=list)
    page_errors: list[tuple[int, str]] = field(default_factory=list)

    def record_failure(self, match_id: int, error: str) -> None:
        self.failed_games += 1
        self.errors.append(MatchError(match_id=match_id, error=error))


@dataclass(frozen=True)
class Completed:
    """The player's history was walked to the end (or to a page cap)."""

    stats: CollectionStats


@dataclass(frozen=True)
class Stopped:
    """The run was cut short; ``stats`` holds everything gathered so far."""

    stats: CollectionStats
    reason: str


CollectionOutcome = Union[Completed, Stopped]


@dataclass
class CollectionRun:
    """Outcomes of a multi-player collection, in processing order."""

    outcomes: list[CollectionOutcome] = field(default_factory=list)

    @property
    def stopped(self) -> bool:
        return any(isinstance(o, Stopped) for o in self.outcomes)

    @property
    def stats(self) -> list[CollectionStats]:
        return [o.stats for o in self.outcomes]

    @property
    def total_new(self) -> int:
        return sum(s.new_games for s in self.stats)

    @property
    def total_skipped(self) -> int:
        return sum(s.skipped_games for s in self.stats)

    @property
    def total_failed(self) -> int:
        return sum(s.failed_games for s in self.stats)
