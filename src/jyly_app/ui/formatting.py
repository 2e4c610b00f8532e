from __future__ import annotations

from datetime import datetime


def format_played_at(value: datetime) -> str:
    local = value.astimezone() if value.tzinfo is not None else value
    return f"{local.day}.{local.month}.{local.year} {local.hour:02d}:{local.minute:02d}"


def format_points(value: int) -> str:
    return f"{value} pistettä"


def format_progress(done: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return min(1.0, max(0.0, done / total))
