from __future__ import annotations

import logging
import time
import uuid
from typing import Any

import bcrypt

from ..config import DEFAULT_SETTINGS
from .models import Role

logger = logging.getLogger(__name__)

# Keyed by user id; e-mails are unique and compared lower-cased.
_users: dict[str, dict[str, Any]] = {}

PUBLIC_FIELDS = ("id", "name", "email", "role", "is_admin")


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def is_admin_email(email: str, domain: str = DEFAULT_SETTINGS.admin_email_domain) -> bool:
    return email.strip().lower().endswith("@" + domain.lower())


def public_user(record: dict[str, Any]) -> dict[str, Any]:
    """The part of a user record that is safe to put in the session cookie."""
    return {k: record[k] for k in PUBLIC_FIELDS}


def _find_by_email(email: str) -> dict[str, Any] | None:
    email = email.strip().lower()
    for record in _users.values():
        if record["email"] == email:
            return record
    return None


def register_user(
    name: str, email: str, password: str, is_landlord: bool = False
) -> dict[str, Any] | None:
    """Create a user. Returns the public record, or ``None`` if the e-mail is taken."""
    email = email.strip().lower()
    if _find_by_email(email) is not None:
        return None
    record = {
        "id": uuid.uuid4().hex,
        "name": name.strip(),
        "email": email,
        "password_hash": _hash_password(password),
        "role": (Role.landlord if is_landlord else Role.user).value,
        "is_admin": is_admin_email(email),
        "created_at": time.time(),
    }
    _users[record["id"]] = record
    logger.info("Registered user %s (role=%s, admin=%s)", record["id"], record["role"], record["is_admin"])
    return public_user(record)


def authenticate(email: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns the public user record or ``None``."""
    record = _find_by_email(email)
    if record and _verify_password(password, record["password_hash"]):
        return public_user(record)
    return None


def get_user(user_id: str) -> dict[str, Any] | None:
    record = _users.get(user_id)
    return public_user(record) if record else None


def list_users() -> list[dict[str, Any]]:
    return [{**public_user(r), "created_at": r["created_at"]} for r in _users.values()]


def delete_user(user_id: str) -> bool:
    deleted = _users.pop(user_id, None) is not None
    if deleted:
        logger.info("Deleted user %s", user_id)
    return deleted


def clear_users() -> None:
    """Drop every account and re-create the demo users."""
    _users.clear()
    _seed_users()


def _seed_users() -> None:
    """Pre-seed demo users on import."""
    register_user("Demo User", "user@example.com", "user123")
    register_user("Demo Landlord", "landlord@example.com", "landlord123", is_landlord=True)
    register_user("Sakany Admin", "admin@sakany.com", "admin123")


_seed_users()
