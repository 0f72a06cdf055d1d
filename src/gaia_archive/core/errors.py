"""Exception hierarchy for the platform client and collector."""

from __future__ import annotations

from typing import Any

from gaia_archive.core.constants import RATE_LIMIT_SIGNATURE


class GaiaArchiveError(Exception):
    """Base class for all errors raised by gaia_archive."""


class AuthError(GaiaArchiveError):
    """Session establishment failed (token extraction or credential submission)."""


class NotAuthenticated(GaiaArchiveError):
    """A data call was attempted before the session was authenticated."""


class TransportError(GaiaArchiveError):
    """Network failure, timeout, non-2xx status or undecodable body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PlatformError(GaiaArchiveError):
    """The platform answered, but reported an application-level failure."""

    def __init__(self, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload


class RateLimitError(PlatformError):
    """The platform refused the request because the account hit a limit."""


def has_rate_limit_signature(text: str | None) -> bool:
    """Return True if ``text`` carries the platform's rate-limit wording."""
    if not text:
        return False
    return RATE_LIMIT_SIGNATURE.lower() in text.lower()


def is_rate_limited(error: BaseException) -> bool:
    """Decide whether an error signals the platform's rate limit.

    The error text is the only reliable signal; no HTTP status distinguishes it.
    """
    if isinstance(error, RateLimitError):
        return True
    return has_rate_limit_signature(str(error))
