from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

START_DISTANCE = 10
MAX_HITS = 5
COMPLETION_ROUND_LIMIT = 20
GAME_LENGTHS = (10, 20)


class GameMode(str, Enum):
    SETUP = "setup"
    PLAYING = "playing"
    COMPLETED = "completed"
    HISTORY = "history"


@dataclass(slots=True)
class Round:
    round_number: int
    distance: int
    hits: int
    points: int


@dataclass(slots=True)
class Player:
    id: str
    name: str
    rounds: list[Round] = field(default_factory=list)
    total_score: int = 0

    def last_round(self) -> Round | None:
        return self.rounds[-1] if self.rounds else None


@dataclass(slots=True)
class Game:
    id: str
    players: list[Player] = field(default_factory=list)
    current_round: int = 1
    current_player_index: int = 0
    max_rounds: int = 20
    is_completed: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def find_player(self, player_id: str) -> Player | None:
        return next((player for player in self.players if player.id == player_id), None)


@dataclass(slots=True)
class SavedPlayer:
    name: str
    games_played: int = 1
    last_played: datetime = field(default_factory=lambda: datetime.now(tz=UTC))


@dataclass(slots=True)
class JylyState:
    current_game: Game | None = None
    mode: GameMode = GameMode.SETUP
    history: list[Game] = field(default_factory=list)
    saved_players: list[SavedPlayer] = field(default_factory=list)

    @property
    def game_id(self) -> str:
        return self.current_game.id if self.current_game else ""

    def find_saved_player(self, name: str) -> SavedPlayer | None:
        return next((item for item in self.saved_players if item.name == name), None)
