from gaia_archive.core.config import CollectorConfig
from gaia_archive.scraping.pacing import PacingPolicy
from gaia_archive.scraping.session import Session


def test_session_adopts_only_new_tokens():
    session = Session()
    assert session.adopt_token("a") is True
    assert session.adopt_token("a") is False
    assert session.adopt_token("") is False
    assert session.adopt_token(None) is False
    assert session.adopt_token("b") is True
    assert session.request_token == "b"


def test_session_record_user_and_clear():
    session = Session()
    session.adopt_token("a")
    session.record_user(77, "collector")
    assert session.authenticated is True
    session.clear()
    assert session == Session()


def test_pacing_policy_from_config_and_none():
    sleeps = []
    policy = PacingPolicy(request_delay=2.0, detail_delay=0.0, sleep=sleeps.append)
    policy.after_request()
    policy.between_log_and_detail()
    assert sleeps == [2.0]

    cfg = CollectorConfig(request_delay=3.0, detail_delay=1.0)
    from_cfg = PacingPolicy.from_config(cfg)
    assert (from_cfg.request_delay, from_cfg.detail_delay) == (3.0, 1.0)

    quiet = PacingPolicy.none()
    quiet.after_request()
    quiet.between_log_and_detail()
