"""Mutable authentication state owned by the platform client."""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Anti-forgery token, user identity and authentication state.

    The platform may rotate the token after login and on page navigation.
    All writes go through :meth:`adopt_token`, :meth:`record_user` and
    :meth:`clear` so the rotation rule stays in one place.
    """

    request_token: str = ""
    user_id: int | None = None
    username: str | None = None
    authenticated: bool = False

    def adopt_token(self, token: str | None) -> bool:
        """Switch to ``token`` if it is new. Returns True when it changed."""
        if not token or token == self.request_token:
            return False
        if self.request_token:
            logger.debug("Request token rotated by the platform")
        self.request_token = token
        return True

    def record_user(self, user_id: int | None, username: str | None) -> None:
        """Store the logged-in identity and mark the session authenticated."""
        self.user_id = user_id
        self.username = username
        self.authenticated = True

    def clear(self) -> None:
        self.request_token = ""
        self.user_id = None
        self.username = None
        self.authenticated = False
