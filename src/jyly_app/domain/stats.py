from __future__ import annotations

from dataclasses import dataclass

from .models import Game, Player

PERFECT_SCORE = 1000


@dataclass(slots=True)
class PlayerSummary:
    rounds_played: int
    average_points: int
    best_round: int


@dataclass(slots=True)
class GameSummary:
    player_count: int
    rounds_played: int
    average_score: int
    best_round: int


@dataclass(slots=True)
class HistorySummary:
    games_played: int
    average_score: int
    best_score: int
    best_round: int


def _rounded(value: float) -> int:
    # Halves round up.
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def ranking(game: Game) -> list[Player]:
    return sorted(game.players, key=lambda player: player.total_score, reverse=True)


def winner(game: Game) -> Player | None:
    ranked = ranking(game)
    return ranked[0] if ranked else None


def best_round_points(players: list[Player]) -> int:
    return max((item.points for player in players for item in player.rounds), default=0)


def player_summary(player: Player) -> PlayerSummary:
    played = len(player.rounds)
    average = _rounded(player.total_score / played) if played else 0
    return PlayerSummary(
        rounds_played=played,
        average_points=average,
        best_round=best_round_points([player]),
    )


def _average_total(game: Game) -> float:
    if not game.players:
        return 0.0
    return sum(player.total_score for player in game.players) / len(game.players)


def game_summary(game: Game) -> GameSummary:
    return GameSummary(
        player_count=len(game.players),
        rounds_played=sum(len(player.rounds) for player in game.players),
        average_score=_rounded(_average_total(game)),
        best_round=best_round_points(game.players),
    )


def history_summary(history: list[Game]) -> HistorySummary:
    if not history:
        return HistorySummary(games_played=0, average_score=0, best_score=0, best_round=0)
    return HistorySummary(
        games_played=len(history),
        average_score=_rounded(sum(_average_total(game) for game in history) / len(history)),
        best_score=max(
            (player.total_score for game in history for player in game.players), default=0
        ),
        best_round=max(best_round_points(game.players) for game in history),
    )


def rating(total_score: int) -> str:
    if total_score == PERFECT_SCORE:
        return "Täydellinen peli!"
    if total_score >= 800:
        return "Loistava suoritus!"
    if total_score >= 600:
        return "Hyvä peli!"
    return "Hyvin heitetty!"
