from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class Event:
    event_type: str
    data: dict[str, Any] = field(default_factory=dict)


def ev(event_type: str, **data: Any) -> Event:
    return Event(event_type=event_type, data=data)
