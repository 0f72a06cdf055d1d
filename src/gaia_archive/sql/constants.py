from __future__ import annotations

import os
import re
from typing import Optional

_SCHEMA_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _default_schema() -> Optional[str]:
    """Schema from ``GAIA_DB_SCHEMA``; unset means the database default."""
    schema = os.getenv("GAIA_DB_SCHEMA", "").strip()
    if not schema:
        return None
    # Reject anything that is not a plain identifier
    if not _SCHEMA_RE.match(schema):
        return None
    return schema


SCHEMA: Optional[str] = _default_schema()

MATCHES_TABLE = "matches"
MATCH_PLAYERS_TABLE = "match_players"


def qualified(table: str) -> str:
    """Return ``table`` prefixed with the configured schema, if any."""
    return f"{SCHEMA}.{table}" if SCHEMA else table
