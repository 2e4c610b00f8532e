from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from .models import GameMode


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True, kw_only=True)
class Command:
    now: datetime = field(default_factory=_utcnow)


@dataclass(slots=True, kw_only=True)
class CmdCreateGame(Command):
    names: list[str]
    max_rounds: int = 20
    game_id: str = ""


@dataclass(slots=True, kw_only=True)
class CmdAddRound(Command):
    player_id: str
    hits: int


@dataclass(slots=True, kw_only=True)
class CmdNextTurn(Command):
    pass


@dataclass(slots=True, kw_only=True)
class CmdCompleteGame(Command):
    pass


@dataclass(slots=True, kw_only=True)
class CmdUndoLastRound(Command):
    pass


@dataclass(slots=True, kw_only=True)
class CmdLoadGame(Command):
    game_id: str


@dataclass(slots=True, kw_only=True)
class CmdSavePlayer(Command):
    name: str


@dataclass(slots=True, kw_only=True)
class CmdResetGame(Command):
    pass


@dataclass(slots=True, kw_only=True)
class CmdSetMode(Command):
    mode: GameMode | str
