from __future__ import annotations

import time
from typing import Any

SEARCH_EVENT = "search"
QUIZ_EVENT = "lifestyle_quiz"
MATCH_EVENT = "lifestyle_match"

_events: list[dict[str, Any]] = []


def record_event(event_type: str, data: dict[str, Any]) -> None:
    _events.append({
        "type": event_type,
        "timestamp": time.time(),
        **data,
    })


def get_events(event_type: str | None = None) -> list[dict[str, Any]]:
    if event_type is None:
        return _events
    return [e for e in _events if e["type"] == event_type]


def clear_events() -> None:
    _events.clear()
