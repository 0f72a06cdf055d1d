"""
Decoded form of BGA game-log notifications.

The platform delivers a match log as a list of packets, each holding a list of
loosely typed notification dicts distinguished only by their ``type`` tag. This
module decodes them once, at the packet boundary, into a closed set of frozen
dataclasses so the parser can dispatch on the variant instead of re-inspecting
raw dicts. Unknown tags decode to :class:`Unrecognized`.

Field extraction is lenient: a missing or malformed value decodes to ``None``
and the parser decides what to do with it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Union

from gaia_archive.core.vocabulary import IMPLICIT_BUILD_BUILDING, EventType

logger = logging.getLogger(__name__)


def _coerce_int(v: Any) -> int | None:
    try:
        if v is None or isinstance(v, bool):
            return None
        return int(v)
    except (TypeError, ValueError):
        return None


def _first_present(args: dict, *keys: str) -> Any:
    for key in keys:
        value = args.get(key)
        if value not in (None, ""):
            return value
    return None


@dataclass(frozen=True)
class RaceChosen:
    player_id: int | None
    player_name: str | None
    race_id: int | None


@dataclass(frozen=True)
class RoundEnded:
    pass


@dataclass(frozen=True)
class ScoreResult:
    player_id: int | None
    score: int | None
    name: str | None = None


@dataclass(frozen=True)
class GameStateChanged:
    """State transition; ``results`` is set only on the final scoring state."""

    state_name: str | None
    results: tuple[ScoreResult, ...] | None = None


@dataclass(frozen=True)
class Built:
    """A new structure placed on the map (always a mine)."""

    player_id: int | None
    player_name: str | None
    building_id: int = IMPLICIT_BUILD_BUILDING


@dataclass(frozen=True)
class Upgraded:
    player_id: int | None
    player_name: str | None
    building_id: int | None


@dataclass(frozen=True)
class Unrecognized:
    type: str | None
    args: dict = field(default_factory=dict, compare=False)


LogEvent = Union[
    RaceChosen, RoundEnded, GameStateChanged, Built, Upgraded, Unrecognized
]


@dataclass(frozen=True)
class Packet:
    packet_id: int
    timestamp: int | None
    events: tuple[LogEvent, ...]


@dataclass(frozen=True)
class RawMatchLog:
    """All packets of one match, ordered by packet id."""

    match_id: int
    packets: tuple[Packet, ...]

    def iter_events(self):
        """Yield ``(packet, event)`` pairs in replay order."""
        for packet in self.packets:
            for event in packet.events:
                yield packet, event

    @classmethod
    def from_payload(cls, match_id: int, logs: list | None) -> "RawMatchLog":
        """Decode the ``data.logs`` list of a log response."""
        return cls(match_id=int(match_id), packets=decode_packets(logs))


def _decode_results(args: dict) -> tuple[ScoreResult, ...] | None:
    # Final scores sit one level down: args.args.result
    inner = args.get("args")
    if not isinstance(inner, dict):
        return None
    result = inner.get("result")
    if not isinstance(result, list):
        return None
    rows = []
    for entry in result:
        if not isinstance(entry, dict):
            continue
        rows.append(
            ScoreResult(
                player_id=_coerce_int(entry.get("id")),
                score=_coerce_int(entry.get("score")),
                name=entry.get("name"),
            )
        )
    return tuple(rows)


def decode_event(raw: Any) -> LogEvent:
    """Decode one raw notification dict into its event variant."""
    if not isinstance(raw, dict):
        return Unrecognized(type=None)

    tag = raw.get("type")
    args = raw.get("args")
    if not isinstance(args, dict):
        args = {}

    if tag == EventType.CHOOSE_RACE.value:
        return RaceChosen(
            player_id=_coerce_int(_first_present(args, "playerId", "player_id")),
            player_name=_first_present(args, "player_name", "playerName"),
            race_id=_coerce_int(args.get("raceId")),
        )
    if tag == EventType.ROUND_END.value:
        return RoundEnded()
    if tag == EventType.GAME_STATE_CHANGE.value:
        return GameStateChanged(
            state_name=args.get("name"), results=_decode_results(args)
        )
    if tag == EventType.BUILD.value:
        return Built(
            player_id=_coerce_int(_first_present(args, "playerId", "player_id")),
            player_name=_first_present(args, "player_name", "playerName"),
        )
    if tag == EventType.UPGRADE.value:
        return Upgraded(
            player_id=_coerce_int(_first_present(args, "playerId", "player_id")),
            player_name=_first_present(args, "player_name", "playerName"),
            building_id=_coerce_int(args.get("buildingId")),
        )
    return Unrecognized(type=tag, args=args)


def decode_packets(logs: list | None) -> tuple[Packet, ...]:
    """Decode raw packets and order them by packet id.

    Packets without a usable id keep their delivery position relative to each
    other and sort after numbered packets.
    """
    if not logs:
        return ()

    decoded: list[tuple[int, int, Packet]] = []
    for position, raw in enumerate(logs):
        if not isinstance(raw, dict):
            logger.debug(f"Skipping non-dict log packet at position {position}")
            continue
        packet_id = _coerce_int(raw.get("packet_id"))
        events = raw.get("data")
        if not isinstance(events, list):
            events = []
        packet = Packet(
            packet_id=packet_id if packet_id is not None else -1,
            timestamp=_coerce_int(raw.get("time")),
            events=tuple(decode_event(e) for e in events),
        )
        sort_key = packet_id if packet_id is not None else float("inf")
        decoded.append((sort_key, position, packet))

    decoded.sort(key=lambda item: (item[0], item[1]))
    return tuple(packet for _, _, packet in decoded)
