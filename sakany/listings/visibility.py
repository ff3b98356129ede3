"""
Property approval and visibility rules.

A listing is shown to the public only when its owner has published it, an
admin has verified it, and its status is one of the live states.  The raw
``status`` field is not enough to label a listing for its owner because
``"active"`` is written both on submission paths that await verification and
on admin approval, so :func:`derive_display_status` folds the flags together.

Every function here is total: missing or malformed fields count as falsy.
The only exception raised is :class:`InvalidStatusTransition`, and only by
:func:`owner_status_fields`, which guards a write.
"""
from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .models import PropertyStatus, get_field

PUBLIC_STATUSES = frozenset({PropertyStatus.active.value, PropertyStatus.approved.value})

# States reachable only after an admin approval.
APPROVED_LIFECYCLE = frozenset(
    {
        PropertyStatus.active.value,
        PropertyStatus.approved.value,
        PropertyStatus.sold.value,
        PropertyStatus.rented.value,
        PropertyStatus.inactive.value,
    }
)

OWNER_TARGETS = frozenset(
    {
        PropertyStatus.active.value,
        PropertyStatus.sold.value,
        PropertyStatus.rented.value,
        PropertyStatus.inactive.value,
    }
)


class InvalidStatusTransition(ValueError):
    """Raised when an owner asks for a status change the lifecycle forbids."""


def is_publicly_visible(prop: Any) -> bool:
    return (
        get_field(prop, "published") is True
        and get_field(prop, "verified") is True
        and get_field(prop, "status") in PUBLIC_STATUSES
    )


def filter_by_visibility(props: Iterable[Any]) -> list[Any]:
    """Return the publicly visible subset, preserving input order."""
    return [p for p in props if is_publicly_visible(p)]


def derive_display_status(prop: Any) -> str:
    """Label shown to the owner on their own listings page."""
    status = get_field(prop, "status")
    verified = get_field(prop, "verified") is True

    if status == PropertyStatus.rejected.value:
        return PropertyStatus.rejected.value
    if status == PropertyStatus.active.value:
        return PropertyStatus.approved.value if verified else PropertyStatus.pending.value
    if get_field(prop, "published") is True and not verified:
        return PropertyStatus.pending.value
    # Records without a status were never reviewed; label them pending rather than blank.
    if not isinstance(status, str) or not status:
        return PropertyStatus.pending.value
    return status


def is_awaiting_review(prop: Any) -> bool:
    """True while an admin can still approve or reject the listing."""
    return (
        get_field(prop, "status") != PropertyStatus.rejected.value
        and get_field(prop, "verified") is not True
    )


def submission_fields() -> dict[str, Any]:
    return {
        "status": PropertyStatus.pending.value,
        "verified": False,
        "published": True,
        "featured": False,
    }


def approval_fields() -> dict[str, Any]:
    return {
        "status": PropertyStatus.active.value,
        "verified": True,
        "featured": True,
    }


def rejection_fields() -> dict[str, Any]:
    # The record is kept; only its flags change.
    return {
        "status": PropertyStatus.rejected.value,
        "verified": False,
    }


def owner_status_fields(prop: Any, new_status: str) -> dict[str, Any]:
    """
    Fields to write when the owner moves a listing to ``new_status``.

    Owners may only move between the live states, and only once an admin has
    approved the listing.
    """
    target = str(new_status).strip().lower()
    if target not in OWNER_TARGETS:
        raise InvalidStatusTransition(f"Owners cannot set status '{target}'")

    current = get_field(prop, "status")
    if get_field(prop, "verified") is not True or current not in APPROVED_LIFECYCLE:
        raise InvalidStatusTransition(
            f"Listing must be approved before changing status (current: {current})"
        )
    return {"status": target}
