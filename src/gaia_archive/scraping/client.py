"""
Authenticated HTTP client for Board Game Arena.

BGA rejects or truncates data requests that do not look like they come from a
browser that has just navigated to the matching page. The client therefore
replays a navigation sequence (home page, login, landing page for the
resource, data endpoint) on one ``requests.Session`` and always sends the most
recently observed anti-forgery token.

Data endpoints answer HTTP 200 even on failure; the JSON body carries a
``status`` field that must be checked separately from the transport status.
"""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import urlencode

import requests

from gaia_archive.core.config import ClientConfig
from gaia_archive.core.constants import (
    ACCEPT_LANGUAGE,
    DEFAULT_RANKING_MODE,
    FINISHED_GAMES_PATH,
    GAIA_GAME_ID,
    GAME_LOG_PATH,
    GAME_PANEL_NAMES,
    GAMEPANEL_PAGE_PATH,
    GAMEREVIEW_PAGE_PATH,
    GAMESTATS_PAGE_PATH,
    HTML_ACCEPT,
    LOGIN_PATH,
    LOGIN_REFERER_PATH,
    PLAYER_SEARCH_PATH,
    RANKING_PATH,
    REQUEST_TOKEN_COOKIE,
    TABLE_INFO_PATH,
    TABLE_PAGE_PATH,
    USER_AGENT,
)
from gaia_archive.core.errors import (
    AuthError,
    NotAuthenticated,
    PlatformError,
    RateLimitError,
    TransportError,
    has_rate_limit_signature,
)
from gaia_archive.core.events import RawMatchLog
from gaia_archive.core.results import (
    MatchDetail,
    MatchSummary,
    ParticipantDetail,
    PlayerRef,
    normalize_rating,
)
from gaia_archive.scraping.session import Session

logger = logging.getLogger(__name__)

_REQUEST_TOKEN_RE = re.compile(
    r"var\s+bgaConfig\s*=\s*{[^}]*requestToken:\s*'([^']+)'"
)


def extract_request_token(html: str) -> str | None:
    """Pull ``bgaConfig.requestToken`` out of a page's inline script."""
    match = _REQUEST_TOKEN_RE.search(html or "")
    return match.group(1) if match else None


def _coerce_int(v: Any) -> int | None:
    try:
        if v is None or v == "":
            return None
        return int(v)
    except (TypeError, ValueError):
        return None


def _is_success(payload: Any) -> bool:
    if not isinstance(payload, dict):
        return False
    return str(payload.get("status")) == "1"


def _error_text(payload: Any) -> str:
    if isinstance(payload, dict):
        for key in ("error", "exception", "message"):
            if payload.get(key):
                return str(payload[key])
    return "Unknown platform error"


def _parse_table_detail(match_id: int, data: dict) -> MatchDetail:
    """Read per-player names and ratings from a ``tableinfos`` payload.

    Ratings come from ``result.player[*].elo_after`` when the table is
    finished, falling back to ``players[*].elo``.
    """
    participants: dict[int, ParticipantDetail] = {}

    result = data.get("result")
    rows = result.get("player") if isinstance(result, dict) else None
    if isinstance(rows, dict):
        rows = list(rows.values())
    for row in rows or []:
        if not isinstance(row, dict):
            continue
        player_id = _coerce_int(row.get("player_id") or row.get("id"))
        if player_id is None:
            continue
        participants[player_id] = ParticipantDetail(
            player_id=player_id,
            name=row.get("name"),
            rating=normalize_rating(row.get("elo_after")),
        )

    players = data.get("players")
    if isinstance(players, dict):
        for key, entry in players.items():
            if not isinstance(entry, dict):
                continue
            player_id = _coerce_int(entry.get("id") or key)
            if player_id is None:
                continue
            existing = participants.get(player_id)
            if existing is not None and existing.rating is not None:
                continue
            participants[player_id] = ParticipantDetail(
                player_id=player_id,
                name=(existing.name if existing else None) or entry.get("fullname"),
                rating=normalize_rating(entry.get("elo")),
            )

    return MatchDetail(match_id=match_id, participants=participants)


class PlatformClient:
    """Scraping session against Board Game Arena.

    Parameters
    ----------
    config : ClientConfig, optional
        Base URL and timeout
    http : requests.Session, optional
        Pre-built session; a new one is created when omitted

    Examples
    --------
    >>> with PlatformClient() as client:
    ...     client.authenticate("user", "secret")
    ...     matches = client.list_finished_matches(85051404, page=1)
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        http: requests.Session | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._http = http if http is not None else requests.Session()
        self.session = Session()
        self._referer = self.config.base_url
        self._closed = False
        # Last token cookie value seen in the jar
        self._cookie_token: str | None = None

    # ------------------------------------------------------------------ #
    # Context management
    # ------------------------------------------------------------------ #

    def __enter__(self) -> "PlatformClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the HTTP session and forget the login. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self.session.clear()
        self._cookie_token = None
        self._http.close()
        logger.debug("Platform client closed")

    # ------------------------------------------------------------------ #
    # Low-level request plumbing
    # ------------------------------------------------------------------ #

    def _url(self, path: str, params: dict[str, Any] | None = None) -> str:
        url = f"{self.config.base_url}{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    def _browser_headers(self, accept: str) -> dict[str, str]:
        return {
            "User-Agent": USER_AGENT,
            "Accept": accept,
            "Accept-Language": ACCEPT_LANGUAGE,
        }

    def _xhr_headers(self) -> dict[str, str]:
        headers = self._browser_headers("*/*")
        headers.update(
            {
                "X-Request-Token": self.session.request_token,
                "X-Requested-With": "XMLHttpRequest",
                "Referer": self._referer,
            }
        )
        return headers

    def _cookie_value(self, name: str) -> str | None:
        try:
            return self._http.cookies.get(name)
        except requests.cookies.CookieConflictError:
            # Same cookie set for several domains; the last one set wins
            value = None
            for cookie in self._http.cookies:
                if cookie.name == name:
                    value = cookie.value
            return value

    def _sync_token_from_cookies(self) -> None:
        """Adopt the token cookie only when its value changed since last seen.

        The jar keeps an old value around after a page hands out a newer
        token, so an unchanged cookie must not win over that page token.
        """
        token = self._cookie_value(REQUEST_TOKEN_COOKIE)
        if not token or token == "deleted" or token == self._cookie_token:
            return
        self._cookie_token = token
        self.session.adopt_token(token)

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        if self._closed:
            raise TransportError("Platform client is closed")
        try:
            response = self._http.request(
                method, url, timeout=self.config.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        if not response.ok:
            raise TransportError(
                f"{method} {url} returned {response.status_code} {response.reason}",
                status_code=response.status_code,
            )

        if self.session.authenticated:
            self._sync_token_from_cookies()
        return response

    def _decode_json(self, response: requests.Response, url: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON from {url}: {e}") from e

    def _require_auth(self) -> None:
        if not self.session.authenticated:
            raise NotAuthenticated(
                "Not authenticated. Call authenticate() before fetching data."
            )

    def _visit(self, path: str, params: dict[str, Any] | None = None) -> str:
        """Load an HTML page the way a browser would before its XHR calls.

        The page may carry a fresh token in its ``bgaConfig`` block; it becomes
        the token for subsequent data calls.
        """
        url = self._url(path, params)
        response = self._send(
            "GET", url, headers=self._browser_headers(HTML_ACCEPT)
        )
        html = response.text
        self.session.adopt_token(extract_request_token(html))
        self._referer = url
        return html

    def _get_data(self, path: str, params: dict[str, Any]) -> Any:
        """Call a JSON data endpoint and return its ``data`` member.

        Raises
        ------
        NotAuthenticated
            If called before :meth:`authenticate`
        TransportError
            On network failure, non-2xx status or undecodable body
        RateLimitError
            If the platform reports that the account hit a limit
        PlatformError
            For any other application-level failure
        """
        self._require_auth()
        url = self._url(path, params)
        response = self._send("GET", url, headers=self._xhr_headers())
        payload = self._decode_json(response, url)

        if not _is_success(payload):
            message = _error_text(payload)
            if has_rate_limit_signature(message):
                logger.warning(f"Rate limit reported by platform: {message}")
                raise RateLimitError(message, payload=payload)
            raise PlatformError(message, payload=payload)

        return payload.get("data")

    # ------------------------------------------------------------------ #
    # Authentication
    # ------------------------------------------------------------------ #

    def authenticate(self, username: str, password: str) -> Session:
        """Open a session and log in.

        Raises
        ------
        AuthError
            If the home page carries no request token, the transport fails, or
            the platform does not confirm the login. Bad credentials and server
            errors look the same on the wire and are not distinguished.
        """
        logger.info(f"Logging in as {username}")
        try:
            html = self._visit("/")
        except TransportError as e:
            raise AuthError(f"Failed to load home page: {e}") from e

        token = extract_request_token(html)
        if not token:
            raise AuthError("Failed to extract request token from home page")
        self.session.adopt_token(token)

        form = {
            "username": username,
            "password": password,
            "remember_me": "false",
            "request_token": self.session.request_token,
        }
        headers = self._browser_headers("*/*")
        headers.update(
            {
                "Content-Type": "application/x-www-form-urlencoded;charset=UTF-8",
                "X-Request-Token": self.session.request_token,
                "Referer": self._url(LOGIN_REFERER_PATH),
                "Origin": self.config.base_url,
            }
        )

        url = self._url(LOGIN_PATH)
        try:
            response = self._send("POST", url, data=form, headers=headers)
            payload = self._decode_json(response, url)
        except TransportError as e:
            raise AuthError(f"Login request failed: {e}") from e

        data = payload.get("data") if isinstance(payload, dict) else None
        if not _is_success(payload) or not isinstance(data, dict) or not data.get("success"):
            raise AuthError("Login failed: invalid credentials or server error")

        self.session.record_user(
            _coerce_int(data.get("user_id")), data.get("username") or username
        )
        self._sync_token_from_cookies()
        logger.info(
            f"Logged in as {self.session.username} (user id {self.session.user_id})"
        )
        return self.session

    # ------------------------------------------------------------------ #
    # Data operations
    # ------------------------------------------------------------------ #

    def list_finished_matches(
        self, player_id: int, game_id: int = GAIA_GAME_ID, page: int = 1
    ) -> list[MatchSummary]:
        """Return one page (at most ``PAGE_SIZE`` rows) of a player's finished games."""
        self._require_auth()
        self._visit(
            GAMESTATS_PAGE_PATH,
            {
                "player": player_id,
                "opponent_id": 0,
                "game_id": game_id,
                "finished": 1,
            },
        )
        data = self._get_data(
            FINISHED_GAMES_PATH,
            {
                "player": player_id,
                "opponent_id": 0,
                "game_id": game_id,
                "finished": 1,
                "page": page,
                "updateStats": 0,
            },
        )
        tables = data.get("tables") if isinstance(data, dict) else None
        if not isinstance(tables, list):
            raise PlatformError(
                f"Finished games response for player {player_id} has no tables list",
                payload=data,
            )

        summaries = []
        for row in tables:
            try:
                summaries.append(MatchSummary.from_payload(row))
            except (ValueError, AttributeError) as e:
                logger.warning(f"Skipping malformed history row: {e}")
        logger.debug(
            f"Player {player_id} page {page}: {len(summaries)} finished matches"
        )
        return summaries

    def fetch_match_log(self, match_id: int) -> RawMatchLog:
        """Fetch and decode the full notification log of a finished match."""
        self._require_auth()
        self._visit(GAMEREVIEW_PAGE_PATH, {"table": match_id})
        data = self._get_data(
            GAME_LOG_PATH, {"table": match_id, "translated": "true"}
        )
        logs = data.get("logs") if isinstance(data, dict) else None
        if not isinstance(logs, list):
            raise PlatformError(
                f"Log response for match {match_id} has no logs list", payload=data
            )
        return RawMatchLog.from_payload(match_id, logs)

    def fetch_match_detail(self, match_id: int) -> MatchDetail:
        """Fetch per-participant data (ratings) from the table page."""
        self._require_auth()
        self._visit(TABLE_PAGE_PATH, {"table": match_id})
        data = self._get_data(TABLE_INFO_PATH, {"id": match_id})
        if not isinstance(data, dict):
            raise PlatformError(
                f"Table info for match {match_id} is not an object", payload=data
            )
        return _parse_table_detail(int(match_id), data)

    def search_player(self, query: str, count: int = 10) -> list[PlayerRef]:
        """Look players up by name."""
        self._require_auth()
        data = self._get_data(
            PLAYER_SEARCH_PATH, {"q": query, "start": 0, "count": count}
        )
        players = data.get("players") if isinstance(data, dict) else None
        refs = []
        for entry in players or []:
            player_id = _coerce_int(entry.get("id"))
            if player_id is None:
                continue
            refs.append(
                PlayerRef(
                    player_id=player_id,
                    name=entry.get("fullname") or entry.get("name") or str(player_id),
                )
            )
        return refs

    def fetch_ranking(
        self,
        game_id: int = GAIA_GAME_ID,
        start: int = 0,
        mode: str = DEFAULT_RANKING_MODE,
        game_name: str | None = None,
    ) -> list[PlayerRef]:
        """Return one page of the game's ranking board, best first.

        ``game_name`` is the panel page slug for ``game_id``; it is looked up
        for known games and must be given for any other.
        """
        panel_name = game_name or GAME_PANEL_NAMES.get(game_id)
        if panel_name is None:
            raise ValueError(f"No game panel name known for game id {game_id}")
        self._require_auth()
        self._visit(GAMEPANEL_PAGE_PATH, {"game": panel_name})
        data = self._get_data(
            RANKING_PATH, {"game": game_id, "start": start, "mode": mode}
        )
        ranks = data.get("ranks") if isinstance(data, dict) else None
        refs = []
        for entry in ranks or []:
            player_id = _coerce_int(entry.get("id"))
            if player_id is None:
                continue
            refs.append(
                PlayerRef(
                    player_id=player_id,
                    name=entry.get("name") or str(player_id),
                    rating=normalize_rating(entry.get("ranking")),
                )
            )
        return refs
