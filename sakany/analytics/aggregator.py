from __future__ import annotations

from collections import Counter
from typing import Any

from ..listings.visibility import derive_display_status, is_awaiting_review, is_publicly_visible
from .store import MATCH_EVENT, QUIZ_EVENT, SEARCH_EVENT


def compute_dashboard(
    properties: list[dict[str, Any]],
    users: list[dict[str, Any]],
    reports: list[dict[str, Any]],
    events: list[dict[str, Any]],
) -> dict[str, Any]:
    # Listings
    status_counter: Counter[str] = Counter(derive_display_status(p) for p in properties)
    visible = [p for p in properties if is_publicly_visible(p)]
    pending_review = sum(1 for p in properties if is_awaiting_review(p))
    featured = sum(1 for p in visible if p.get("featured") is True)

    # Users
    role_counter: Counter[str] = Counter(u.get("role", "user") for u in users)
    admins = sum(1 for u in users if u.get("is_admin") is True)

    # Reports
    report_counter: Counter[str] = Counter(r.get("status", "pending") for r in reports)

    # Searches
    searches = [e for e in events if e["type"] == SEARCH_EVENT]
    loc_counter: Counter[str] = Counter()
    for s in searches:
        location = (s.get("location") or "").strip().lower()
        if location:
            loc_counter[location] += 1
    top_locations = [{"name": n, "count": c} for n, c in loc_counter.most_common(10)]
    results = [s["total"] for s in searches if "total" in s]
    empty_searches = sum(1 for n in results if n == 0)

    # Lifestyle quiz
    quizzes = [e for e in events if e["type"] == QUIZ_EVENT]
    lifestyle_counter: Counter[str] = Counter(q.get("lifestyle", "unknown") for q in quizzes)
    priority_counter: Counter[str] = Counter()
    for q in quizzes:
        for p in q.get("priorities", []) or []:
            priority_counter[p] += 1
    matches = sum(1 for e in events if e["type"] == MATCH_EVENT)

    return {
        "properties": {
            "total": len(properties),
            "visible": len(visible),
            "pending_review": pending_review,
            "featured": featured,
            "by_status": dict(status_counter),
        },
        "users": {
            "total": len(users),
            "admins": admins,
            "by_role": dict(role_counter),
        },
        "reports": {
            "total": len(reports),
            "by_status": dict(report_counter),
        },
        "searches": {
            "total": len(searches),
            "empty_result_rate": round(empty_searches / len(results) * 100, 1) if results else 0.0,
            "top_locations": top_locations,
        },
        "lifestyle": {
            "completed_quizzes": len(quizzes),
            "strict_matches": matches,
            "distribution": dict(lifestyle_counter),
            "top_priorities": [
                {"name": n, "count": c} for n, c in priority_counter.most_common(5)
            ],
        },
    }
