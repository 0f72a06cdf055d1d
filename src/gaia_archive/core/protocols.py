"""Protocol definitions for pluggable collaborators of the collector."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from gaia_archive.core.results import ParsedMatch


ProgressSink = Callable[[str], None]


@runtime_checkable
class MatchStore(Protocol):
    """Persistence contract consumed by the collector.

    ``store`` must persist the match and all of its players as one atomic
    unit, so a match never "exists" without its players.
    """

    def exists(self, match_id: int) -> bool:
        """Return True if the match has already been stored."""
        ...

    def store(self, match: ParsedMatch) -> None:
        """Persist a parsed match and its player records."""
        ...
