from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class HitSelection:
    """Hit count picked on the game view, waiting for its confirmation delay.

    Each pick gets a fresh token. A delayed commit only goes through while its
    token is still the active one, so undo, quit or a new pick void it.
    """

    hits: int | None = None
    token: int = 0
    task: Any = None

    @property
    def pending(self) -> bool:
        return self.hits is not None

    def select(self, hits: int) -> int | None:
        if self.pending:
            return None
        self.token += 1
        self.hits = hits
        return self.token

    def attach(self, task: Any) -> None:
        self.task = task

    def take(self, token: int) -> int | None:
        if token != self.token or self.hits is None:
            return None
        hits = self.hits
        self.hits = None
        self.task = None
        return hits

    def cancel(self) -> None:
        self.token += 1
        self.hits = None
        task, self.task = self.task, None
        cancel = getattr(task, "cancel", None)
        if callable(cancel):
            cancel()
