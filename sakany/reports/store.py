from __future__ import annotations

import copy
import logging
import time
import uuid
from collections.abc import Iterable
from typing import Any

from .models import ReportStatus

logger = logging.getLogger(__name__)

_reports: dict[str, dict[str, Any]] = {}
_feedback: list[dict[str, Any]] = []


def create_report(
    prop: dict[str, Any], reporter: dict[str, Any], reason: str, details: str = ""
) -> dict[str, Any]:
    now = time.time()
    report = {
        "id": uuid.uuid4().hex,
        "property_id": prop["id"],
        "property_title": prop.get("title", ""),
        "reported_by": reporter["id"],
        "reporter_email": reporter.get("email"),
        "owner_id": prop.get("user_id"),
        "owner_email": prop.get("user_email"),
        "reason": reason,
        "details": details,
        "status": ReportStatus.pending.value,
        "admin_notes": "",
        "reviewed_by": None,
        "notification_sent": False,
        "notification_date": None,
        "created_at": now,
        "updated_at": now,
    }
    _reports[report["id"]] = report
    logger.info("Report %s filed against property %s", report["id"], prop["id"])
    return report


def get_report(report_id: str) -> dict[str, Any] | None:
    return _reports.get(report_id)


def list_reports(status: str | None = None) -> list[dict[str, Any]]:
    """Reports newest first, optionally only those with ``status``."""
    reports = [r for r in _reports.values() if status is None or r["status"] == status]
    return sorted(reports, key=lambda r: r["created_at"], reverse=True)


def review_report(
    report_id: str, status: str, admin_notes: str, reviewed_by: str
) -> dict[str, Any] | None:
    report = _reports.get(report_id)
    if report is None:
        return None
    report.update(
        status=status,
        admin_notes=admin_notes,
        reviewed_by=reviewed_by,
        updated_at=time.time(),
    )
    logger.info("Report %s marked %s by %s", report_id, status, reviewed_by)
    return report


def mark_notification_sent(report_id: str) -> dict[str, Any] | None:
    report = _reports.get(report_id)
    if report is None:
        return None
    now = time.time()
    report.update(notification_sent=True, notification_date=now, updated_at=now)
    return report


def add_feedback(report: dict[str, Any], admin_notes: str) -> dict[str, Any]:
    """Leave an admin notice on the reported property for its owner."""
    notice = {
        "id": uuid.uuid4().hex,
        "report_id": report["id"],
        "property_id": report["property_id"],
        "property_title": report["property_title"],
        "admin_notes": admin_notes,
        "reason": report["reason"],
        "status": report["status"],
        "read": False,
        "created_at": time.time(),
    }
    _feedback.append(notice)
    return notice


def get_property_feedback(property_id: str, mark_as_read: bool = False) -> list[dict[str, Any]]:
    """
    Notices for one property, newest first.

    The returned items show the state before marking, so a caller can still
    tell which notices were new.
    """
    notices = [f for f in _feedback if f["property_id"] == property_id]
    snapshot = [copy.deepcopy(f) for f in reversed(notices)]
    if mark_as_read:
        for f in notices:
            f["read"] = True
    return snapshot


def unread_feedback(property_ids: Iterable[str]) -> list[dict[str, Any]]:
    wanted = set(property_ids)
    return [f for f in reversed(_feedback) if f["property_id"] in wanted and not f["read"]]


def remove_property_feedback(property_id: str) -> None:
    # Reports are kept for the admin history; only owner notices go.
    _feedback[:] = [f for f in _feedback if f["property_id"] != property_id]


def clear_reports() -> None:
    _reports.clear()
    _feedback.clear()
