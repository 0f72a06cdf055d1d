"""Gaia Project vocabulary as it appears in BGA game logs.

Pure lookup tables: race ids, building ids and the notification tags the
parser dispatches on. Nothing here holds state.
"""

from __future__ import annotations

from enum import Enum, IntEnum


class Race(IntEnum):
    """Faction identifiers used by the BGA implementation."""

    TERRANS = 1
    LANTIDS = 2
    XENOS = 3
    GLEENS = 4
    TAKLONS = 5
    AMBAS = 6
    HADSCH_HALLAS = 7
    IVITS = 8
    GEODENS = 9
    BAL_TAKS = 10
    FIRACS = 11
    BESCODS = 12
    NEVLAS = 13
    ITARS = 14


RACE_NAMES: dict[int, str] = {
    Race.TERRANS: "Terrans",
    Race.LANTIDS: "Lantids",
    Race.XENOS: "Xenos",
    Race.GLEENS: "Gleens",
    Race.TAKLONS: "Taklons",
    Race.AMBAS: "Ambas",
    Race.HADSCH_HALLAS: "Hadsch Hallas",
    Race.IVITS: "Ivits",
    Race.GEODENS: "Geodens",
    Race.BAL_TAKS: "Bal T'aks",
    Race.FIRACS: "Firacs",
    Race.BESCODS: "Bescods",
    Race.NEVLAS: "Nevlas",
    Race.ITARS: "Itars",
}

RACE_NAME_TO_ID: dict[str, int] = {
    name: int(race_id) for race_id, name in RACE_NAMES.items()
}


class Building(IntEnum):
    """Structure identifiers. Gaia formers and space stations are not logged."""

    MINE = 4
    TRADING_STATION = 5
    RESEARCH_LAB = 6
    ACADEMY_KNOWLEDGE = 7
    ACADEMY_QIC = 8
    PLANETARY_INSTITUTE = 9


BUILDING_NAMES: dict[int, str] = {
    Building.MINE: "Mine",
    Building.TRADING_STATION: "Trading Station",
    Building.RESEARCH_LAB: "Research Lab",
    Building.ACADEMY_KNOWLEDGE: "Academy (Knowledge)",
    Building.ACADEMY_QIC: "Academy (QIC)",
    Building.PLANETARY_INSTITUTE: "Planetary Institute",
}


class EventType(str, Enum):
    """Notification tags the parser reacts to."""

    CHOOSE_RACE = "notifyChooseRace"
    GAME_STATE_CHANGE = "gameStateChange"
    ROUND_END = "notifyRoundEnd"
    BUILD = "notifyBuild"
    UPGRADE = "notifyUpgrade"


# notifyBuild never names the structure; it is always a mine
IMPLICIT_BUILD_BUILDING: int = Building.MINE


def get_race_name(race_id: int | None) -> str:
    """Return the display name for a race id."""
    if race_id is None:
        return "Unknown Race"
    return RACE_NAMES.get(race_id, f"Unknown Race ({race_id})")


def get_building_name(building_id: int | None) -> str:
    """Return the display name for a building id."""
    if building_id is None:
        return "Unknown Building"
    return BUILDING_NAMES.get(building_id, f"Unknown Building ({building_id})")
