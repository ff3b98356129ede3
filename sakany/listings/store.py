from __future__ import annotations

import logging
import time
import uuid
from typing import Any

from .visibility import submission_fields

logger = logging.getLogger(__name__)

# Insertion-ordered: iteration yields oldest listings first.
_properties: dict[str, dict[str, Any]] = {}


def create_property(owner: dict[str, Any], data: dict[str, Any]) -> dict[str, Any]:
    """Store a landlord submission. New listings always start pending review."""
    now = time.time()
    record: dict[str, Any] = {
        **data,
        **submission_fields(),
        "id": uuid.uuid4().hex,
        "user_id": owner["id"],
        "user_email": owner.get("email"),
        "created_at": now,
        "updated_at": now,
    }
    _properties[record["id"]] = record
    logger.info("Property %s submitted by user %s", record["id"], owner["id"])
    return record


def load_properties(records: list[dict[str, Any]]) -> int:
    """Insert already-validated records (seed data), keeping their flags."""
    for record in records:
        _properties[record["id"]] = dict(record)
    return len(records)


def get_property(property_id: str) -> dict[str, Any] | None:
    return _properties.get(property_id)


def list_properties() -> list[dict[str, Any]]:
    return list(_properties.values())


def list_user_properties(user_id: str) -> list[dict[str, Any]]:
    return [p for p in _properties.values() if p.get("user_id") == user_id]


def update_property(property_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
    record = _properties.get(property_id)
    if record is None:
        return None
    record.update(fields)
    record["updated_at"] = time.time()
    return record


def delete_property(property_id: str) -> bool:
    deleted = _properties.pop(property_id, None) is not None
    if deleted:
        logger.info("Property %s deleted", property_id)
    return deleted


def delete_user_properties(user_id: str) -> list[str]:
    """Remove every listing owned by ``user_id`` and return the removed ids."""
    ids = [pid for pid, p in _properties.items() if p.get("user_id") == user_id]
    for pid in ids:
        del _properties[pid]
    if ids:
        logger.info("Deleted %d properties of user %s", len(ids), user_id)
    return ids


def clear_properties() -> None:
    _properties.clear()
