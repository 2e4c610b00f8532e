from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

from jyly_app.app.controller import GameController, create_controller
from jyly_app.domain.commands import CmdSavePlayer
from jyly_app.domain.engine import Decider
from jyly_app.domain.events import ev
from jyly_app.domain.models import GameMode, JylyState
from jyly_app.infra.logging import LogWriter
from jyly_app.infra.storage import STORAGE_KEY, ConfigStore, StateStore


def make_controller(tmp_path: Path) -> GameController:
    return GameController(
        decider=Decider(),
        log_writer=LogWriter(tmp_path / "events.log"),
        store=StateStore(tmp_path / "state.json"),
    )


def test_operations_log_events(tmp_path: Path):
    controller = make_controller(tmp_path)
    controller.create_game(["Alice", "Bob"])
    result = controller.record_turn(4)
    assert [event.event_type for event in result.events] == ["ROUND_ADDED", "TURN_ADVANCED"]
    assert any("EVENT=ROUND_ADDED" in line and "points=40" in line for line in result.log_lines)
    game_id = controller.state.game_id
    assert all(f"G={game_id}" in line for line in result.log_lines)


def test_subscribers_notified_once_per_state_change(tmp_path: Path):
    controller = make_controller(tmp_path)
    calls: list[GameMode] = []
    unsubscribe = controller.subscribe(lambda ctl: calls.append(ctl.state.mode))

    controller.create_game(["Alice"])
    assert calls == [GameMode.PLAYING]

    controller.add_round("unknown-player", 3)
    controller.undo_last_round()
    controller.load_game("missing")
    assert len(calls) == 1

    controller.reset_game()
    assert calls[-1] == GameMode.SETUP

    unsubscribe()
    controller.set_mode(GameMode.HISTORY)
    assert len(calls) == 2


def test_state_survives_restart(tmp_path: Path):
    controller = make_controller(tmp_path)
    controller.create_game(["Alice", "Bob"], max_rounds=10)
    controller.record_turn(4)
    controller.record_turn(2)

    reloaded = make_controller(tmp_path)
    assert reloaded.state == controller.state
    assert reloaded.state.mode == GameMode.PLAYING
    assert reloaded.current_player().name == "Alice"
    assert reloaded.current_distance() == 9
    assert reloaded.can_undo() is True


def test_saved_player_timestamps_roundtrip_and_sort(tmp_path: Path):
    controller = make_controller(tmp_path)
    start = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
    controller.dispatch(CmdSavePlayer(now=start, name="Mikko"))
    controller.dispatch(CmdSavePlayer(now=start + timedelta(hours=1), name="Anna"))

    reloaded = make_controller(tmp_path)
    players = reloaded.saved_players()
    assert [item.name for item in players] == ["Anna", "Mikko"]
    assert players[1].last_played == start


def test_document_uses_single_storage_key(tmp_path: Path):
    controller = make_controller(tmp_path)
    controller.create_game(["Alice"])
    document = json.loads((tmp_path / "state.json").read_text(encoding="utf-8"))
    assert list(document) == [STORAGE_KEY]
    state = document[STORAGE_KEY]["state"]
    assert state["mode"] == "playing"
    assert state["current_game"]["players"][0]["name"] == "Alice"
    datetime.fromisoformat(state["saved_players"][0]["last_played"])


def test_completed_game_in_playing_mode_is_repaired_on_load(tmp_path: Path):
    controller = make_controller(tmp_path)
    controller.create_game(["Alice"])
    controller.record_turn(5)
    controller.complete_game()
    path = tmp_path / "state.json"
    document = json.loads(path.read_text(encoding="utf-8"))
    document[STORAGE_KEY]["state"]["mode"] = "playing"
    path.write_text(json.dumps(document), encoding="utf-8")

    reloaded = make_controller(tmp_path)
    assert reloaded.state.mode == GameMode.COMPLETED
    assert len(reloaded.state.history) == 1


def test_unreadable_state_falls_back_to_defaults(tmp_path: Path):
    (tmp_path / "state.json").write_text("{not json", encoding="utf-8")
    assert StateStore(tmp_path / "state.json").load() == JylyState()
    (tmp_path / "other.json").write_text('{"something": {}}', encoding="utf-8")
    assert StateStore(tmp_path / "other.json").load() == JylyState()
    assert StateStore(tmp_path / "missing.json").load() == JylyState()


def test_completed_game_and_history_flow(tmp_path: Path):
    controller = make_controller(tmp_path)
    controller.create_game(["Solo"])
    for _ in range(20):
        controller.record_turn(5)
    assert controller.state.mode == GameMode.COMPLETED
    assert controller.is_game_complete() is True
    assert len(controller.state.history) == 1
    assert controller.record_turn(5).events == []
    archived = controller.state.history[0]
    assert archived.players[0].total_score == 1000

    controller.set_mode(GameMode.HISTORY)
    controller.load_game(archived.id)
    assert controller.state.mode == GameMode.COMPLETED
    assert controller.state.current_game.id == archived.id


def test_record_turn_without_game_does_nothing(tmp_path: Path):
    controller = make_controller(tmp_path)
    result = controller.record_turn(3)
    assert result.events == []
    assert not (tmp_path / "state.json").exists()


def test_config_store_roundtrip(tmp_path: Path):
    cfg = ConfigStore(tmp_path / "config.ini")
    assert cfg.max_rounds() == 20
    assert cfg.roster() == []
    cfg.save_setup(["Alice", " Bob ", "  "], 10)
    assert cfg.max_rounds() == 10
    assert cfg.roster() == ["Alice", "Bob"]


def test_config_store_rejects_unknown_length(tmp_path: Path):
    path = tmp_path / "config.ini"
    path.write_text("[game]\nmax_rounds = 15\n", encoding="utf-8")
    assert ConfigStore(path).max_rounds() == 20
    path.write_text("[game]\nmax_rounds = many\n", encoding="utf-8")
    assert ConfigStore(path).max_rounds() == 20


def test_log_file_has_header(tmp_path: Path):
    writer = LogWriter(tmp_path / "l.log")
    text = (tmp_path / "l.log").read_text(encoding="utf-8")
    assert "LOG_FORMAT v=1" in text
    writer.append("g", ev("X", player_id=None))
    text2 = (tmp_path / "l.log").read_text(encoding="utf-8")
    assert "EVENT=X player_id=-" in text2


def test_create_controller_uses_data_dir(tmp_path: Path):
    controller = create_controller(tmp_path)
    controller.create_game(["Alice"])
    assert (tmp_path / "state.json").exists()
    assert (tmp_path / "logs" / "events.log").exists()


def test_short_game_ends_after_its_last_round(tmp_path: Path):
    controller = make_controller(tmp_path)
    controller.create_game(["Solo"], max_rounds=10)
    results = [controller.record_turn(5) for _ in range(12)]

    player = controller.state.current_game.players[0]
    assert len(player.rounds) == 10
    assert player.total_score == 500
    assert controller.state.current_game.is_completed is True
    assert controller.state.mode == GameMode.COMPLETED
    assert len(controller.state.history) == 1
    assert results[9].events[-1].event_type == "GAME_COMPLETED"
    assert results[10].events == []


def test_short_game_with_two_players_gives_everyone_all_rounds(tmp_path: Path):
    controller = make_controller(tmp_path)
    controller.create_game(["Alice", "Bob"], max_rounds=10)
    for _ in range(25):
        controller.record_turn(3)

    game = controller.state.current_game
    assert [len(player.rounds) for player in game.players] == [10, 10]
    assert game.current_round == 11
    assert len(controller.state.history) == 1


def test_log_keeps_list_items_apart(tmp_path: Path):
    writer = LogWriter(tmp_path / "l.log")
    line = writer.append(
        "g",
        ev("GAME_CREATED", players=[{"id": "a", "name": "Alice"}, {"id": "b", "name": "Bob"}]),
    )
    assert 'players="id:a,name:Alice;id:b,name:Bob"' in line
