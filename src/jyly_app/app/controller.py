from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from jyly_app.domain import engine
from jyly_app.domain.commands import (
    CmdAddRound,
    CmdCompleteGame,
    CmdCreateGame,
    CmdLoadGame,
    CmdNextTurn,
    CmdResetGame,
    CmdSavePlayer,
    CmdSetMode,
    CmdUndoLastRound,
    Command,
)
from jyly_app.domain.engine import Decider, apply_event
from jyly_app.domain.events import Event
from jyly_app.domain.models import GameMode, JylyState, Player, SavedPlayer
from jyly_app.infra.logging import LogWriter
from jyly_app.infra.storage import StateStore

Listener = Callable[["GameController"], None]


@dataclass(slots=True)
class DispatchResult:
    events: list[Event] = field(default_factory=list)
    log_lines: list[str] = field(default_factory=list)


class GameController:
    """Single owner of the application state.

    Every command goes through ``dispatch``: the decider turns it into events,
    each event is logged and folded into the state, then the state is saved
    and subscribers are notified. Commands that decide nothing leave the state,
    the store and the subscribers untouched.
    """

    def __init__(
        self,
        decider: Decider,
        log_writer: LogWriter,
        store: StateStore | None = None,
    ):
        self.decider = decider
        self.log_writer = log_writer
        self.store = store
        self.state = store.load() if store is not None else JylyState()
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, command: Command) -> DispatchResult:
        events = self.decider.decide(self.state, command)
        result = DispatchResult(events=list(events))

        for event in events:
            game_id = self.state.game_id
            if event.event_type == "GAME_CREATED":
                game_id = event.data["game_id"]
            result.log_lines.append(self.log_writer.append(game_id, event))
            self.state = apply_event(self.state, event)

        if events:
            if self.store is not None:
                self.store.save(self.state)
            for listener in list(self._listeners):
                listener(self)

        return result

    def create_game(self, names: list[str], max_rounds: int = 20) -> DispatchResult:
        return self.dispatch(CmdCreateGame(names=list(names), max_rounds=max_rounds))

    def add_round(self, player_id: str, hits: int) -> DispatchResult:
        return self.dispatch(CmdAddRound(player_id=player_id, hits=hits))

    def next_turn(self) -> DispatchResult:
        return self.dispatch(CmdNextTurn())

    def complete_game(self) -> DispatchResult:
        return self.dispatch(CmdCompleteGame())

    def undo_last_round(self) -> DispatchResult:
        return self.dispatch(CmdUndoLastRound())

    def load_game(self, game_id: str) -> DispatchResult:
        return self.dispatch(CmdLoadGame(game_id=game_id))

    def save_player(self, name: str) -> DispatchResult:
        return self.dispatch(CmdSavePlayer(name=name))

    def reset_game(self) -> DispatchResult:
        return self.dispatch(CmdResetGame())

    def set_mode(self, mode: GameMode | str) -> DispatchResult:
        return self.dispatch(CmdSetMode(mode=mode))

    def record_turn(self, hits: int) -> DispatchResult:
        game = self.state.current_game
        player = self.current_player()
        if game is None or player is None or game.is_completed:
            return DispatchResult()
        result = self.add_round(player.id, hits)
        steps = [self.next_turn()]
        # next_turn only finishes 20-round games; shorter ones end here.
        if self.is_game_complete() and not game.is_completed:
            steps.append(self.complete_game())
        for step in steps:
            result.events.extend(step.events)
            result.log_lines.extend(step.log_lines)
        return result

    def current_player(self) -> Player | None:
        return engine.current_player(self.state)

    def current_distance(self) -> int:
        return engine.current_distance(self.state)

    def is_game_complete(self) -> bool:
        return engine.is_game_complete(self.state)

    def can_undo(self) -> bool:
        return engine.can_undo(self.state)

    def saved_players(self) -> list[SavedPlayer]:
        return engine.saved_players_by_recency(self.state)


def create_controller(data_dir: Path) -> GameController:
    return GameController(
        decider=Decider(),
        log_writer=LogWriter(data_dir / "logs" / "events.log"),
        store=StateStore(data_dir / "state.json"),
    )
