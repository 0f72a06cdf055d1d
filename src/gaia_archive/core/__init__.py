"""Core components: vocabulary, decoded events, value types and the log parser."""

from gaia_archive.core.config import ClientConfig, CollectorConfig, Credentials
from gaia_archive.core.errors import (
    AuthError,
    GaiaArchiveError,
    NotAuthenticated,
    PlatformError,
    RateLimitError,
    TransportError,
    is_rate_limited,
)
from gaia_archive.core.events import (
    Built,
    GameStateChanged,
    LogEvent,
    Packet,
    RaceChosen,
    RawMatchLog,
    RoundEnded,
    ScoreResult,
    Unrecognized,
    Upgraded,
    decode_event,
    decode_packets,
)
from gaia_archive.core.parser import determine_winner, parse_match_log
from gaia_archive.core.protocols import MatchStore, ProgressSink
from gaia_archive.core.results import (
    CollectionOutcome,
    CollectionRun,
    CollectionStats,
    Completed,
    MatchDetail,
    MatchError,
    MatchSummary,
    ParsedMatch,
    ParticipantDetail,
    PlayerRecord,
    PlayerRef,
    Stopped,
)

__all__ = [
    # Config
    "ClientConfig",
    "CollectorConfig",
    "Credentials",
    # Errors
    "GaiaArchiveError",
    "AuthError",
    "NotAuthenticated",
    "PlatformError",
    "RateLimitError",
    "TransportError",
    "is_rate_limited",
    # Events
    "LogEvent",
    "RaceChosen",
    "RoundEnded",
    "GameStateChanged",
    "ScoreResult",
    "Built",
    "Upgraded",
    "Unrecognized",
    "Packet",
    "RawMatchLog",
    "decode_event",
    "decode_packets",
    # Parser
    "parse_match_log",
    "determine_winner",
    # Protocols
    "MatchStore",
    "ProgressSink",
    # Results
    "MatchSummary",
    "MatchDetail",
    "ParticipantDetail",
    "PlayerRef",
    "PlayerRecord",
    "ParsedMatch",
    "MatchError",
    "CollectionStats",
    "Completed",
    "Stopped",
    "CollectionOutcome",
    "CollectionRun",
]
