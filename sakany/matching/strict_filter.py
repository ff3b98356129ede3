from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ..listings.models import as_number, get_field
from .models import SimpleQuizPreferences

FAMILY_MIN_BEDROOMS = 2
ONE_BEDROOM_STATUSES = ("single", "married")


def matches_simple_quiz(prop: Any, prefs: SimpleQuizPreferences) -> bool:
    """
    All three answers must hold at once. An unanswered question imposes
    nothing; a property missing the field a question needs fails it.
    """
    if prefs.residence_type:
        ptype = get_field(prop, "property_type")
        if not isinstance(ptype, str) or ptype.strip().lower() != prefs.residence_type:
            return False

    if prefs.family_status:
        bedrooms = as_number(get_field(prop, "bedrooms"))
        if prefs.family_status == "family_with_children":
            if bedrooms is None or bedrooms < FAMILY_MIN_BEDROOMS:
                return False
        elif prefs.family_status in ONE_BEDROOM_STATUSES:
            if bedrooms != 1:
                return False

    if prefs.budget > 0:
        price = as_number(get_field(prop, "price"))
        if price is None or price > prefs.budget:
            return False

    return True


def apply_strict_filter(props: Iterable[Any], prefs: SimpleQuizPreferences) -> list[Any]:
    return [p for p in props if matches_simple_quiz(p, prefs)]


def to_search_filters(prefs: SimpleQuizPreferences) -> dict[str, Any]:
    """
    Manual search filters pre-filled from the short quiz answers.

    Keys are ``SearchFilters`` fields. Search only knows a bedroom minimum, so
    the exactly-one-bedroom rule for single or married households holds on the
    match endpoint alone.
    """
    filters: dict[str, Any] = {}
    if prefs.residence_type:
        filters["property_type"] = prefs.residence_type
    if prefs.family_status:
        filters["min_bedrooms"] = (
            FAMILY_MIN_BEDROOMS if prefs.family_status == "family_with_children" else 1
        )
    if prefs.budget > 0:
        filters["max_price"] = prefs.budget
    return filters
