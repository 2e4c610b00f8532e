from __future__ import annotations

from copy import deepcopy
from datetime import datetime

from .commands import (
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
from .events import Event, ev
from .models import (
    COMPLETION_ROUND_LIMIT,
    MAX_HITS,
    START_DISTANCE,
    Game,
    GameMode,
    JylyState,
    Player,
    Round,
    SavedPlayer,
)

DISTANCE_BY_HITS = {0: 5, 1: 6, 2: 7, 3: 8, 4: 9, 5: 10}


class CommandError(ValueError):
    """Raised when command cannot be applied in current state."""


def calculate_next_distance(previous_hits: int) -> int:
    return DISTANCE_BY_HITS.get(previous_hits, START_DISTANCE)


def clamp_hits(hits: int) -> int:
    return min(max(hits, 0), MAX_HITS)


def distance_for(player: Player) -> int:
    last = player.last_round()
    if last is None:
        return START_DISTANCE
    return calculate_next_distance(last.hits)


def current_player(state: JylyState) -> Player | None:
    game = state.current_game
    if game is None or not 0 <= game.current_player_index < len(game.players):
        return None
    return game.players[game.current_player_index]


def current_distance(state: JylyState) -> int:
    player = current_player(state)
    return START_DISTANCE if player is None else distance_for(player)


def is_game_complete(state: JylyState) -> bool:
    game = state.current_game
    return game is not None and game.current_round > game.max_rounds


def can_undo(state: JylyState) -> bool:
    game = state.current_game
    return game is not None and any(player.rounds for player in game.players)


def saved_players_by_recency(state: JylyState) -> list[SavedPlayer]:
    return sorted(state.saved_players, key=lambda item: item.last_played, reverse=True)


def find_history_game(state: JylyState, game_id: str) -> Game | None:
    return next((game for game in state.history if game.id == game_id), None)


class Decider:
    def decide(self, state: JylyState, command: Command) -> list[Event]:
        if isinstance(command, CmdCreateGame):
            return self._decide_create(command)
        if isinstance(command, CmdAddRound):
            return self._decide_add_round(state, command)
        if isinstance(command, CmdNextTurn):
            return self._decide_next_turn(state)
        if isinstance(command, CmdCompleteGame):
            return [ev("GAME_COMPLETED")] if state.current_game is not None else []
        if isinstance(command, CmdUndoLastRound):
            return self._decide_undo(state)
        if isinstance(command, CmdLoadGame):
            return self._decide_load(state, command)
        if isinstance(command, CmdSavePlayer):
            return self._decide_save_player(command.name, command)
        if isinstance(command, CmdResetGame):
            return [ev("GAME_RESET")]
        if isinstance(command, CmdSetMode):
            try:
                mode = GameMode(command.mode)
            except ValueError as exc:
                raise CommandError(f"Unknown mode {command.mode!r}") from exc
            return [ev("MODE_CHANGED", mode=mode.value)]

        raise CommandError(f"Unsupported command {type(command)!r}")

    @staticmethod
    def _decide_save_player(name: str, command: Command) -> list[Event]:
        trimmed = name.strip()
        if not trimmed:
            return []
        return [ev("PLAYER_SAVED", name=trimmed, now=command.now)]

    def _decide_create(self, command: CmdCreateGame) -> list[Event]:
        stamp = int(command.now.timestamp() * 1000)
        game_id = command.game_id or f"game-{stamp}"
        events: list[Event] = []
        for name in command.names:
            events.extend(self._decide_save_player(name, command))
        events.append(
            ev(
                "GAME_CREATED",
                game_id=game_id,
                max_rounds=command.max_rounds,
                players=[
                    {"id": f"player-{stamp}-{index}", "name": name.strip()}
                    for index, name in enumerate(command.names)
                ],
                created_at=command.now,
            )
        )
        return events

    @staticmethod
    def _decide_add_round(state: JylyState, command: CmdAddRound) -> list[Event]:
        game = state.current_game
        if game is None:
            return []
        player = game.find_player(command.player_id)
        if player is None:
            return []

        distance = distance_for(player)
        hits = clamp_hits(command.hits)
        return [
            ev(
                "ROUND_ADDED",
                player_id=player.id,
                round_number=game.current_round,
                distance=distance,
                hits=hits,
                points=distance * hits,
            )
        ]

    @staticmethod
    def _decide_next_turn(state: JylyState) -> list[Event]:
        game = state.current_game
        if game is None or not game.players:
            return []

        next_index = (game.current_player_index + 1) % len(game.players)
        next_round = game.current_round + 1 if next_index == 0 else game.current_round
        events = [ev("TURN_ADVANCED", player_index=next_index, current_round=next_round)]
        # Fixed limit, not game.max_rounds: 10-round games end through is_game_complete().
        if next_round > COMPLETION_ROUND_LIMIT:
            events.append(ev("GAME_COMPLETED"))
        return events

    @staticmethod
    def _decide_undo(state: JylyState) -> list[Event]:
        game = state.current_game
        if game is None or not can_undo(state):
            return []

        players = game.players
        index = game.current_player_index - 1
        current_round = game.current_round
        if index < 0:
            index = len(players) - 1
            current_round = max(1, current_round - 1)

        if not players[index].rounds:
            for candidate in range(len(players) - 1, -1, -1):
                rounds = players[candidate].rounds
                if rounds:
                    index = candidate
                    current_round = rounds[-1].round_number
                    break

        target = players[index]
        return [
            ev(
                "ROUND_UNDONE",
                player_id=target.id if target.rounds else None,
                player_index=index,
                current_round=current_round,
            )
        ]

    @staticmethod
    def _decide_load(state: JylyState, command: CmdLoadGame) -> list[Event]:
        game = find_history_game(state, command.game_id)
        if game is None:
            return []
        mode = GameMode.COMPLETED if game.is_completed else GameMode.PLAYING
        return [ev("GAME_LOADED", game_id=game.id, mode=mode.value)]


def _apply_saved_player(state: JylyState, name: str, now: datetime) -> None:
    existing = state.find_saved_player(name)
    if existing is not None:
        existing.games_played += 1
        existing.last_played = now
    else:
        state.saved_players.append(SavedPlayer(name=name, games_played=1, last_played=now))


def apply_event(state: JylyState, event: Event) -> JylyState:
    game = state.current_game

    if event.event_type == "PLAYER_SAVED":
        _apply_saved_player(state, event.data["name"], event.data["now"])

    elif event.event_type == "GAME_CREATED":
        state.current_game = Game(
            id=event.data["game_id"],
            players=[Player(id=item["id"], name=item["name"]) for item in event.data["players"]],
            max_rounds=event.data["max_rounds"],
            created_at=event.data["created_at"],
        )
        state.mode = GameMode.PLAYING

    elif event.event_type == "ROUND_ADDED" and game is not None:
        player = game.find_player(event.data["player_id"])
        if player is not None:
            new_round = Round(
                round_number=event.data["round_number"],
                distance=event.data["distance"],
                hits=event.data["hits"],
                points=event.data["points"],
            )
            player.rounds.append(new_round)
            player.total_score += new_round.points

    elif event.event_type == "TURN_ADVANCED" and game is not None:
        game.current_player_index = event.data["player_index"]
        game.current_round = event.data["current_round"]

    elif event.event_type == "GAME_COMPLETED" and game is not None:
        game.is_completed = True
        state.history.append(deepcopy(game))
        state.mode = GameMode.COMPLETED

    elif event.event_type == "ROUND_UNDONE" and game is not None:
        index = event.data["player_index"]
        target = game.players[index]
        if event.data["player_id"] is not None and target.rounds:
            removed = target.rounds.pop()
            target.total_score -= removed.points
        game.current_player_index = index
        game.current_round = event.data["current_round"]

    elif event.event_type == "GAME_LOADED":
        archived = find_history_game(state, event.data["game_id"])
        if archived is not None:
            state.current_game = deepcopy(archived)
            state.mode = GameMode(event.data["mode"])

    elif event.event_type == "GAME_RESET":
        state.current_game = None
        state.mode = GameMode.SETUP

    elif event.event_type == "MODE_CHANGED":
        state.mode = GameMode(event.data["mode"])

    return state
