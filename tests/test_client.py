"""Tests for the BGA platform client against a fake HTTP session."""

from urllib.parse import parse_qs, urlparse

import pytest

from gaia_archive.core.config import ClientConfig
from gaia_archive.core.errors import (
    AuthError,
    NotAuthenticated,
    PlatformError,
    RateLimitError,
    TransportError,
)
from gaia_archive.scraping.client import PlatformClient, extract_request_token

BASE = "https://bga.test"
HOME_HTML = "<script>var bgaConfig = { siteUrl: '/', requestToken: 'tok1', x: 1 };</script>"
LOGIN_OK = {
    "status": 1,
    "data": {"success": True, "user_id": "777", "username": "collector"},
}


class FakeResponse:
    def __init__(self, status_code=200, text="", payload=None):
        self.status_code = status_code
        self.reason = "OK" if status_code < 400 else "Error"
        self.text = text
        self._payload = payload

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeHttp:
    """Route requests by URL path; record every call."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []
        self.cookies = {}
        self.closed = 0

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append((method, url, kwargs))
        route = self.routes.get(urlparse(url).path)
        if route is None:
            return FakeResponse(404)
        if callable(route):
            return route(method, url, kwargs)
        return route

    def close(self):
        self.closed += 1

    def paths(self):
        return [urlparse(url).path for _, url, _ in self.calls]


def _ok(data):
    return FakeResponse(payload={"status": 1, "data": data})


def _routes(**extra):
    routes = {
        "/": FakeResponse(text=HOME_HTML),
        "/account/auth/loginUserWithPassword.html": FakeResponse(payload=LOGIN_OK),
    }
    routes.update(extra)
    return routes


def _client(routes):
    http = FakeHttp(routes)
    return PlatformClient(ClientConfig(base_url=BASE, timeout=1.0), http=http), http


def _logged_in(**extra):
    client, http = _client(_routes(**extra))
    client.authenticate("collector", "secret")
    return client, http


def test_extract_request_token():
    assert extract_request_token(HOME_HTML) == "tok1"
    assert extract_request_token("<html>no config here</html>") is None
    assert extract_request_token("") is None


def test_authenticate_success_sends_token_with_credentials():
    client, http = _client(_routes())
    session = client.authenticate("collector", "secret")

    assert session.authenticated is True
    assert session.user_id == 777
    assert session.username == "collector"
    assert session.request_token == "tok1"

    method, _, kwargs = http.calls[1]
    assert method == "POST"
    assert kwargs["data"]["request_token"] == "tok1"
    assert kwargs["data"]["username"] == "collector"
    assert kwargs["headers"]["X-Request-Token"] == "tok1"


def test_authenticate_without_token_fails():
    client, _ = _client(_routes(**{"/": FakeResponse(text="<html></html>")}))
    with pytest.raises(AuthError):
        client.authenticate("collector", "secret")
    assert client.session.authenticated is False


@pytest.mark.parametrize(
    "payload",
    [
        {"status": 0, "error": "Wrong password"},
        {"status": 1, "data": {"success": False}},
        {"status": "1"},
    ],
)
def test_authenticate_rejected_login_fails(payload):
    login = FakeResponse(payload=payload)
    client, _ = _client(
        _routes(**{"/account/auth/loginUserWithPassword.html": login})
    )
    with pytest.raises(AuthError):
        client.authenticate("collector", "wrong")
    assert client.session.authenticated is False


def test_authenticate_transport_failure_is_auth_error():
    client, _ = _client(_routes(**{"/": FakeResponse(status_code=503)}))
    with pytest.raises(AuthError):
        client.authenticate("collector", "secret")


def test_token_rotation_from_cookie_is_used_for_data_calls():
    def login(method, url, kwargs):
        http.cookies["TournoiEnLigneidt"] = "tok2"
        return FakeResponse(payload=LOGIN_OK)

    client, http = _client(
        _routes(
            **{
                "/account/auth/loginUserWithPassword.html": login,
                "/gamereview": FakeResponse(text="<html></html>"),
                "/archive/archive/logs.html": _ok({"logs": []}),
            }
        )
    )
    client.authenticate("collector", "secret")
    assert client.session.request_token == "tok2"

    client.fetch_match_log(123)
    _, _, kwargs = http.calls[-1]
    assert kwargs["headers"]["X-Request-Token"] == "tok2"


def test_deleted_cookie_does_not_replace_token():
    def login(method, url, kwargs):
        http.cookies["TournoiEnLigneidt"] = "deleted"
        return FakeResponse(payload=LOGIN_OK)

    client, http = _client(
        _routes(**{"/account/auth/loginUserWithPassword.html": login})
    )
    client.authenticate("collector", "secret")
    assert client.session.request_token == "tok1"


def test_data_calls_require_authentication():
    client, http = _client(_routes())
    with pytest.raises(NotAuthenticated):
        client.list_finished_matches(85051404)
    with pytest.raises(NotAuthenticated):
        client.fetch_match_log(1)
    with pytest.raises(NotAuthenticated):
        client.fetch_match_detail(1)
    with pytest.raises(NotAuthenticated):
        client.search_player("someone")
    with pytest.raises(NotAuthenticated):
        client.fetch_ranking()
    assert http.calls == []


def test_list_finished_matches_visits_stats_page_first():
    rows = [
        {"table_id": "100", "game_id": "1495", "game_name": "gaiaproject",
         "players": "1,2", "player_names": "A,B", "scores": "150,120", "ranks": "1,2"},
        {"game_name": "gaiaproject"},
        {"table_id": "101", "game_id": "1495", "game_name": "gaiaproject"},
    ]
    client, http = _logged_in(
        **{
            "/gamestats": FakeResponse(text="<html></html>"),
            "/gamestats/gamestats/getGames.html": _ok({"tables": rows}),
        }
    )

    summaries = client.list_finished_matches(85051404, page=2)

    assert http.paths()[-2:] == ["/gamestats", "/gamestats/gamestats/getGames.html"]
    query = parse_qs(urlparse(http.calls[-1][1]).query)
    assert query["page"] == ["2"]
    assert query["player"] == ["85051404"]
    assert query["game_id"] == ["1495"]
    # The row without table_id is skipped
    assert [s.match_id for s in summaries] == [100, 101]
    assert summaries[0].player_ids == (1, 2)
    assert summaries[0].scores == (150, 120)


def test_list_finished_matches_requires_tables_list():
    client, _ = _logged_in(
        **{
            "/gamestats": FakeResponse(text="<html></html>"),
            "/gamestats/gamestats/getGames.html": _ok({"nope": True}),
        }
    )
    with pytest.raises(PlatformError):
        client.list_finished_matches(1)


def test_page_visit_adopts_token_from_html():
    page = "<script>var bgaConfig = { requestToken: 'tok3' };</script>"
    client, http = _logged_in(
        **{
            "/gamereview": FakeResponse(text=page),
            "/archive/archive/logs.html": _ok({"logs": []}),
        }
    )
    client.fetch_match_log(5)
    _, url, kwargs = http.calls[-1]
    assert kwargs["headers"]["X-Request-Token"] == "tok3"
    assert kwargs["headers"]["Referer"] == f"{BASE}/gamereview?table=5"
    assert parse_qs(urlparse(url).query)["translated"] == ["true"]


def test_fetch_match_log_decodes_packets():
    logs = [
        {"packet_id": "2", "data": [{"type": "notifyRoundEnd", "args": {}}]},
        {"packet_id": "1", "data": [{"type": "notifyBuild", "args": {"playerId": 1}}]},
    ]
    client, _ = _logged_in(
        **{
            "/gamereview": FakeResponse(text=""),
            "/archive/archive/logs.html": _ok({"logs": logs}),
        }
    )
    log = client.fetch_match_log(9)
    assert log.match_id == 9
    assert [p.packet_id for p in log.packets] == [1, 2]


def test_application_error_raises_platform_error():
    client, _ = _logged_in(
        **{
            "/gamereview": FakeResponse(text=""),
            "/archive/archive/logs.html": FakeResponse(
                payload={"status": 0, "error": "This table does not exist"}
            ),
        }
    )
    with pytest.raises(PlatformError) as excinfo:
        client.fetch_match_log(9)
    assert not isinstance(excinfo.value, RateLimitError)
    assert "does not exist" in str(excinfo.value)


def test_rate_limit_text_raises_rate_limit_error():
    client, _ = _logged_in(
        **{
            "/gamereview": FakeResponse(text=""),
            "/archive/archive/logs.html": FakeResponse(
                payload={
                    "status": "0",
                    "error": "You have reached a limit of replays for today",
                }
            ),
        }
    )
    with pytest.raises(RateLimitError):
        client.fetch_match_log(9)


def test_non_2xx_raises_transport_error_with_status():
    client, _ = _logged_in(
        **{
            "/table": FakeResponse(text=""),
            "/table/table/tableinfos.html": FakeResponse(status_code=502),
        }
    )
    with pytest.raises(TransportError) as excinfo:
        client.fetch_match_detail(9)
    assert excinfo.value.status_code == 502


def test_undecodable_json_raises_transport_error():
    client, _ = _logged_in(
        **{
            "/table": FakeResponse(text=""),
            "/table/table/tableinfos.html": FakeResponse(text="<html>oops</html>"),
        }
    )
    with pytest.raises(TransportError):
        client.fetch_match_detail(9)


def test_fetch_match_detail_normalizes_ratings():
    data = {
        "result": {
            "player": [
                {"player_id": "1", "name": "A", "elo_after": "1712.4"},
                {"player_id": "2", "name": "B", "elo_after": None},
            ]
        },
        "players": {
            "2": {"id": "2", "fullname": "B", "elo": "1650"},
            "3": {"id": "3", "fullname": "C"},
        },
    }
    client, _ = _logged_in(
        **{
            "/table": FakeResponse(text=""),
            "/table/table/tableinfos.html": _ok(data),
        }
    )
    detail = client.fetch_match_detail(9)
    assert detail.rating_for(1) == 412
    assert detail.rating_for(2) == 350
    assert detail.rating_for(3) is None
    assert detail.participants[3].name == "C"


def test_search_player_and_ranking():
    client, http = _logged_in(
        **{
            "/omnibar/omnibar/search.html": _ok(
                {"players": [{"id": "85051404", "fullname": "AlabeSons"}, {"fullname": "x"}]}
            ),
            "/gamepanel": FakeResponse(text=""),
            "/gamepanel/gamepanel/getRanking.html": _ok(
                {"ranks": [{"id": "1", "name": "Top", "ranking": "1900"}]}
            ),
        }
    )

    found = client.search_player("Alabe")
    assert [(p.player_id, p.name) for p in found] == [(85051404, "AlabeSons")]
    assert parse_qs(urlparse(http.calls[-1][1]).query)["q"] == ["Alabe"]

    ranking = client.fetch_ranking(start=10)
    assert ranking[0].player_id == 1
    assert ranking[0].rating == 600
    assert http.paths()[-2] == "/gamepanel"
    assert parse_qs(urlparse(http.calls[-1][1]).query)["start"] == ["10"]


def test_close_is_idempotent_and_forgets_login():
    client, http = _logged_in()
    with client:
        pass
    client.close()
    assert http.closed == 1
    assert client.session.authenticated is False
    with pytest.raises(NotAuthenticated):
        client.fetch_match_log(1)


def test_unchanged_cookie_does_not_override_newer_page_token():
    def login(method, url, kwargs):
        http.cookies["TournoiEnLigneidt"] = "tok2"
        return FakeResponse(payload=LOGIN_OK)

    page = "<script>var bgaConfig = { requestToken: 'tok3' };</script>"
    client, http = _client(
        _routes(
            **{
                "/account/auth/loginUserWithPassword.html": login,
                "/gamereview": FakeResponse(text=page),
                "/archive/archive/logs.html": _ok({"logs": []}),
                "/omnibar/omnibar/search.html": _ok({"players": []}),
            }
        )
    )
    client.authenticate("collector", "secret")
    assert client.session.request_token == "tok2"

    client.fetch_match_log(5)
    assert http.calls[-1][2]["headers"]["X-Request-Token"] == "tok3"

    # No page visit before search: the page token still applies
    client.search_player("x")
    assert http.calls[-1][2]["headers"]["X-Request-Token"] == "tok3"

    # A cookie that really changes is adopted again
    http.cookies["TournoiEnLigneidt"] = "tok4"
    client.search_player("y")
    client.search_player("z")
    assert http.calls[-1][2]["headers"]["X-Request-Token"] == "tok4"


def test_fetch_ranking_visits_panel_for_requested_game():
    client, http = _logged_in(
        **{
            "/gamepanel": FakeResponse(text=""),
            "/gamepanel/gamepanel/getRanking.html": _ok({"ranks": []}),
        }
    )

    client.fetch_ranking()
    assert parse_qs(urlparse(http.calls[-2][1]).query)["game"] == ["gaiaproject"]

    client.fetch_ranking(game_id=1234, game_name="terramystica")
    assert parse_qs(urlparse(http.calls[-2][1]).query)["game"] == ["terramystica"]
    assert parse_qs(urlparse(http.calls[-1][1]).query)["game"] == ["1234"]

    with pytest.raises(ValueError):
        client.fetch_ranking(game_id=1234)
