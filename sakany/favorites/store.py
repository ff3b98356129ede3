from __future__ import annotations

import time
import uuid
from typing import Any

_favorites: list[dict[str, Any]] = []


def _find(user_id: str, property_id: str) -> dict[str, Any] | None:
    for fav in _favorites:
        if fav["user_id"] == user_id and fav["property_id"] == property_id:
            return fav
    return None


def add_favorite(user_id: str, property_id: str) -> dict[str, Any]:
    """Save ``property_id`` for ``user_id``; saving twice returns the first entry."""
    existing = _find(user_id, property_id)
    if existing is not None:
        return existing
    fav = {
        "id": uuid.uuid4().hex,
        "user_id": user_id,
        "property_id": property_id,
        "created_at": time.time(),
    }
    _favorites.append(fav)
    return fav


def remove_favorite(user_id: str, property_id: str) -> bool:
    fav = _find(user_id, property_id)
    if fav is None:
        return False
    _favorites.remove(fav)
    return True


def is_favorite(user_id: str, property_id: str) -> bool:
    return _find(user_id, property_id) is not None


def list_favorites(user_id: str) -> list[dict[str, Any]]:
    mine = [f for f in _favorites if f["user_id"] == user_id]
    # Appends are chronological, so reversing gives newest first.
    return list(reversed(mine))


def remove_property_favorites(property_id: str) -> int:
    before = len(_favorites)
    _favorites[:] = [f for f in _favorites if f["property_id"] != property_id]
    return before - len(_favorites)


def remove_user_favorites(user_id: str) -> int:
    before = len(_favorites)
    _favorites[:] = [f for f in _favorites if f["user_id"] != user_id]
    return before - len(_favorites)


def clear_favorites() -> None:
    _favorites.clear()
