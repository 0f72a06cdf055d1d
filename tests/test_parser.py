"""Tests for the Gaia Project log parser."""

from gaia_archive.core.events import RawMatchLog
from gaia_archive.core.parser import determine_winner, parse_match_log
from gaia_archive.core.results import (
    MatchDetail,
    MatchSummary,
    ParticipantDetail,
    PlayerRecord,
)


def _summary(match_id=555):
    return MatchSummary(match_id=match_id, game_id=1495, game_name="gaiaproject")


def _packet(packet_id, *events):
    return {"packet_id": str(packet_id), "time": "1700000000", "data": list(events)}


def _race(player_id, name, race_id):
    return {
        "type": "notifyChooseRace",
        "args": {"playerId": player_id, "player_name": name, "raceId": race_id},
    }


def _build(player_id, name):
    return {"type": "notifyBuild", "args": {"playerId": player_id, "player_name": name}}


def _upgrade(player_id, name, building_id):
    return {
        "type": "notifyUpgrade",
        "args": {"playerId": player_id, "player_name": name, "buildingId": building_id},
    }


def _round_end():
    return {"type": "notifyRoundEnd", "args": {}}


def _results(*pairs):
    return {
        "type": "gameStateChange",
        "args": {
            "name": "gameEnd",
            "args": {"result": [{"id": pid, "score": score} for pid, score in pairs]},
        },
    }


def _log(*packets, match_id=555):
    return RawMatchLog.from_payload(match_id, list(packets))


def test_two_player_match_parses_rounds_scores_and_winner():
    log = _log(
        _packet(1, _race(1, "Alice", 1), _race(2, "Bob", 5)),
        _packet(2, _build(1, "Alice")),
        _packet(3, _round_end()),
        _packet(4, _upgrade(2, "Bob", 6)),
        _packet(5, _results((1, 90), (2, 120))),
    )

    parsed = parse_match_log(_summary(), log)

    alice = parsed.get_player(1)
    bob = parsed.get_player(2)
    assert alice.race_id == 1
    assert alice.race_name == "Terrans"
    assert alice.buildings_by_round == [[4]]
    assert alice.final_score == 90
    assert bob.race_name == "Taklons"
    assert bob.buildings_by_round == [[], [6]]
    assert bob.final_score == 120
    assert parsed.winner_name == "Bob"
    assert parsed.player_count == 2


def test_summary_identity_is_copied_verbatim():
    summary = MatchSummary(match_id=42, game_id=None, game_name=None)
    parsed = parse_match_log(summary, _log(match_id=42))
    assert parsed.match_id == 42
    assert parsed.game_id is None
    assert parsed.game_name is None


def test_packets_are_replayed_in_packet_id_order():
    # Delivered out of order: the build must still land after the round end
    log = _log(
        _packet(3, _build(1, "Alice")),
        _packet(1, _race(1, "Alice", 3)),
        _packet(2, _round_end()),
    )
    parsed = parse_match_log(_summary(), log)
    assert parsed.get_player(1).buildings_by_round == [[], [4]]


def test_skipped_rounds_are_padded_with_empty_lists():
    log = _log(
        _packet(1, _race(7, "Cara", 8)),
        _packet(2, _round_end(), _round_end(), _round_end()),
        _packet(3, _upgrade(7, "Cara", 9)),
    )
    parsed = parse_match_log(_summary(), log)
    assert parsed.get_player(7).buildings_by_round == [[], [], [], [9]]


def test_events_for_unknown_players_are_skipped():
    log = _log(
        _packet(1, _race(1, "Alice", 1)),
        _packet(2, _build(99, "Ghost"), _upgrade(99, "Ghost", 5)),
        _packet(3, _results((1, 10), (99, 500))),
    )
    parsed = parse_match_log(_summary(), log)
    assert parsed.player_count == 1
    assert parsed.get_player(99) is None
    assert parsed.get_player(1).buildings_by_round == []
    assert parsed.get_player(1).final_score == 10
    assert parsed.winner_name == "Alice"


def test_upgrade_without_building_id_is_ignored():
    log = _log(
        _packet(1, _race(1, "Alice", 1)),
        _packet(2, {"type": "notifyUpgrade", "args": {"playerId": 1}}),
    )
    parsed = parse_match_log(_summary(), log)
    assert parsed.get_player(1).buildings_by_round == []


def test_duplicate_race_selection_keeps_first():
    log = _log(_packet(1, _race(1, "Alice", 1), _race(1, "Alice", 2)))
    parsed = parse_match_log(_summary(), log)
    assert parsed.player_count == 1
    assert parsed.get_player(1).race_id == 1


def test_state_change_without_results_leaves_scores_alone():
    log = _log(
        _packet(1, _race(1, "Alice", 1)),
        _packet(2, {"type": "gameStateChange", "args": {"name": "playerTurn"}}),
    )
    parsed = parse_match_log(_summary(), log)
    assert parsed.get_player(1).final_score == 0


def test_unknown_race_id_gets_placeholder_name():
    log = _log(_packet(1, _race(1, "Alice", 77)))
    parsed = parse_match_log(_summary(), log)
    assert parsed.get_player(1).race_name == "Unknown Race (77)"


def test_empty_log_yields_empty_match():
    parsed = parse_match_log(_summary(), _log())
    assert parsed.players == []
    assert parsed.player_count == 0
    assert parsed.winner_name == ""
    assert parsed.min_player_elo is None


def test_detail_ratings_fill_players_and_min_elo():
    log = _log(_packet(1, _race(1, "Alice", 1), _race(2, "Bob", 2), _race(3, "Cy", 3)))
    detail = MatchDetail(
        match_id=555,
        participants={
            1: ParticipantDetail(player_id=1, name="Alice", rating=410),
            2: ParticipantDetail(player_id=2, name="Bob", rating=385),
        },
    )
    parsed = parse_match_log(_summary(), log, detail)
    assert parsed.get_player(1).rating == 410
    assert parsed.get_player(2).rating == 385
    assert parsed.get_player(3).rating is None
    assert parsed.min_player_elo == 385


def test_determine_winner_prefers_first_on_tie():
    players = [
        PlayerRecord(player_id=1, player_name="A", race_id=1, race_name="Terrans", final_score=150),
        PlayerRecord(player_id=2, player_name="B", race_id=2, race_name="Lantids", final_score=150),
        PlayerRecord(player_id=3, player_name="C", race_id=3, race_name="Xenos", final_score=120),
    ]
    assert determine_winner(players) == "A"


def test_determine_winner_empty():
    assert determine_winner([]) == ""


def test_to_dict_is_plain_data():
    log = _log(_packet(1, _race(1, "Alice", 1)), _packet(2, _build(1, "Alice")))
    data = parse_match_log(_summary(), log).to_dict()
    assert data["match_id"] == 555
    assert data["players"][0]["buildings_by_round"] == [[4]]
