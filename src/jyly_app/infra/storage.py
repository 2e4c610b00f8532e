from __future__ import annotations

import json
import logging
from configparser import ConfigParser
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from jyly_app.domain.models import (
    GAME_LENGTHS,
    Game,
    GameMode,
    JylyState,
    Player,
    Round,
    SavedPlayer,
)

STORAGE_KEY = "jyly-storage"
STORAGE_VERSION = 1
DEFAULT_MAX_ROUNDS = 20

logger = logging.getLogger(__name__)


def _dump_time(value: datetime) -> str:
    return value.isoformat()


def _load_time(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def game_to_dict(game: Game) -> dict[str, Any]:
    return {
        "id": game.id,
        "players": [
            {
                "id": player.id,
                "name": player.name,
                "rounds": [
                    {
                        "round_number": item.round_number,
                        "distance": item.distance,
                        "hits": item.hits,
                        "points": item.points,
                    }
                    for item in player.rounds
                ],
                "total_score": player.total_score,
            }
            for player in game.players
        ],
        "current_round": game.current_round,
        "current_player_index": game.current_player_index,
        "max_rounds": game.max_rounds,
        "is_completed": game.is_completed,
        "created_at": _dump_time(game.created_at),
    }


def game_from_dict(raw: dict[str, Any]) -> Game:
    players = []
    for item in raw.get("players", []):
        rounds = [Round(**entry) for entry in item.get("rounds", [])]
        players.append(
            Player(
                id=item["id"],
                name=item["name"],
                rounds=rounds,
                total_score=int(item.get("total_score", sum(entry.points for entry in rounds))),
            )
        )
    return Game(
        id=raw["id"],
        players=players,
        current_round=int(raw.get("current_round", 1)),
        current_player_index=int(raw.get("current_player_index", 0)),
        max_rounds=int(raw.get("max_rounds", DEFAULT_MAX_ROUNDS)),
        is_completed=bool(raw.get("is_completed", False)),
        created_at=_load_time(raw["created_at"]),
    )


def state_to_dict(state: JylyState) -> dict[str, Any]:
    return {
        "current_game": game_to_dict(state.current_game) if state.current_game else None,
        "mode": state.mode.value,
        "history": [game_to_dict(game) for game in state.history],
        "saved_players": [
            {
                "name": item.name,
                "games_played": item.games_played,
                "last_played": _dump_time(item.last_played),
            }
            for item in state.saved_players
        ],
    }


def state_from_dict(raw: dict[str, Any]) -> JylyState:
    current = raw.get("current_game")
    state = JylyState(
        current_game=game_from_dict(current) if current else None,
        mode=GameMode(raw.get("mode", GameMode.SETUP.value)),
        history=[game_from_dict(item) for item in raw.get("history", [])],
        saved_players=[
            SavedPlayer(
                name=item["name"],
                games_played=int(item.get("games_played", 1)),
                last_played=_load_time(item["last_played"]),
            )
            for item in raw.get("saved_players", [])
        ],
    )
    if state.current_game is not None and state.current_game.is_completed:
        if state.mode == GameMode.PLAYING:
            state.mode = GameMode.COMPLETED
    return state


class StateStore:
    def __init__(self, path: Path):
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> JylyState:
        if not self.path.exists():
            return JylyState()
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
            payload = document[STORAGE_KEY]["state"]
            return state_from_dict(payload)
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, exc)
            return JylyState()

    def save(self, state: JylyState) -> None:
        document = {STORAGE_KEY: {"state": state_to_dict(state), "version": STORAGE_VERSION}}
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)


class ConfigStore:
    def __init__(self, path: Path):
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> ConfigParser:
        parser = ConfigParser()
        if self.path.exists():
            parser.read(self.path, encoding="utf-8")
        return parser

    def save_setup(self, names: list[str], max_rounds: int) -> None:
        parser = self.load()
        parser["meta"] = {"config_version": "1"}
        parser["game"] = {"max_rounds": str(max_rounds)}
        parser["roster"] = {"names": ",".join(name.strip() for name in names if name.strip())}
        with self.path.open("w", encoding="utf-8") as handle:
            parser.write(handle)

    def max_rounds(self) -> int:
        parser = self.load()
        if "game" not in parser:
            return DEFAULT_MAX_ROUNDS
        try:
            value = parser["game"].getint("max_rounds", fallback=DEFAULT_MAX_ROUNDS)
        except ValueError:
            return DEFAULT_MAX_ROUNDS
        return value if value in GAME_LENGTHS else DEFAULT_MAX_ROUNDS

    def roster(self) -> list[str]:
        parser = self.load()
        if "roster" not in parser:
            return []
        raw = parser["roster"].get("names", "")
        return [part.strip() for part in raw.split(",") if part.strip()]
