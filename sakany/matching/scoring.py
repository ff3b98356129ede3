"""
Weighted lifestyle scoring for the full quiz.

Each accumulator is the sum of fixed integer weights whose rule matches the
answers. Rules only read the preferences, so unset answers (empty strings,
zero budget, ``None`` outdoor space) never match anything.
"""
from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from ..config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from .models import (
    Commute,
    Environment,
    FamilyStatus,
    LifestyleScore,
    LocationTrend,
    QuizPreferences,
    QuizResult,
    ResidenceType,
    WorkStyle,
)

Rule = tuple[int, Callable[[QuizPreferences], bool]]

LUXURY_BUDGET = 750_000
LOCATION_KEYS = ("urban", "suburban", "rural")


def _amenity(name: str) -> Callable[[QuizPreferences], bool]:
    return lambda p: name in p.amenities


def _priority(name: str) -> Callable[[QuizPreferences], bool]:
    return lambda p: name in p.priorities


def _answer(field: str, *values: Enum) -> Callable[[QuizPreferences], bool]:
    accepted = {v.value for v in values}
    return lambda p: getattr(p, field) in accepted


def _outdoor(low: int, high: int) -> Callable[[QuizPreferences], bool]:
    return lambda p: p.outdoor_space is not None and low <= p.outdoor_space <= high


RULES: dict[str, list[Rule]] = {
    "family": [
        (30, _answer("family_status", FamilyStatus.couple_with_children)),
        (20, _answer("family_status", FamilyStatus.couple_planning_children)),
        (10, lambda p: p.pets is True),
        (15, lambda p: p.bedrooms >= 3),
        (10, _amenity("parks")),
        (15, _amenity("schools")),
        (10, _priority("space")),
        (10, _priority("safety")),
    ],
    "luxury": [
        (25, lambda p: p.budget > LUXURY_BUDGET),
        (10, _amenity("gym")),
        (10, _amenity("pool")),
        (10, _amenity("restaurants")),
        (15, _priority("quality")),
        (20, _priority("prestige")),
        (10, _answer("residence_type", ResidenceType.villa)),
    ],
    "investment": [
        (30, _priority("investment")),
        (20, _priority("value")),
        (10, _answer("residence_type", ResidenceType.apartment)),
        (15, _answer("location", LocationTrend.growing)),
        (25, _answer("work_style", WorkStyle.rental)),
    ],
    "urban": [
        (25, _answer("environment", Environment.urban)),
        (15, _answer("commute", Commute.public_transport, Commute.walking)),
        (10, _amenity("restaurants")),
        (10, _amenity("cafes")),
        (10, _amenity("shopping")),
        (15, _amenity("nightlife")),
        (10, _answer("residence_type", ResidenceType.apartment)),
        (10, _outdoor(1, 2)),
        (10, _answer("work_style", WorkStyle.office)),
    ],
    "suburban": [
        (25, _answer("environment", Environment.suburban)),
        (15, _answer("commute", Commute.car)),
        (15, _answer("residence_type", ResidenceType.house)),
        (10, lambda p: "couple" in p.family_status),
        (15, _outdoor(3, 4)),
        (10, _amenity("parks")),
        (5, _amenity("shopping")),
        (10, _priority("community")),
    ],
    "rural": [
        (30, _answer("environment", Environment.rural)),
        (10, _answer("commute", Commute.car)),
        (20, _outdoor(5, 5)),
        (10, _answer("residence_type", ResidenceType.house)),
        (20, _answer("residence_type", ResidenceType.farm)),
        (15, _amenity("nature")),
        (15, _priority("space")),
        (15, _priority("privacy")),
        (10, _answer("work_style", WorkStyle.remote)),
    ],
}


def compute_scores(prefs: QuizPreferences) -> LifestyleScore:
    totals = {
        key: sum(weight for weight, matches in rules if matches(prefs))
        for key, rules in RULES.items()
    }
    return LifestyleScore(**totals)


def classify(scores: LifestyleScore, order: tuple[str, ...] = LOCATION_KEYS) -> str:
    """
    Pick the location archetype with the strictly highest score.

    Ties and all-zero scores resolve to the earliest key of ``order``.
    Keys that are not location accumulators are ignored.
    """
    keys = [k for k in order if k in LOCATION_KEYS] or list(LOCATION_KEYS)
    best = keys[0]
    best_score = 0
    for key in keys:
        value = getattr(scores, key)
        if value > best_score:
            best, best_score = key, value
    return best


def derive_priorities(prefs: QuizPreferences, limit: int = 3) -> list[str]:
    priorities = list(prefs.priorities)

    implicit = []
    if prefs.family_status in (
        "couple_with_children",
        "couple_planning_children",
        "family_with_children",
    ):
        implicit.append("family")
    if prefs.budget > LUXURY_BUDGET or prefs.residence_type == "villa":
        implicit.append("luxury")
    if prefs.work_style == "rental" or "value" in prefs.priorities:
        implicit.append("investment")

    for item in implicit:
        if item not in priorities:
            priorities.append(item)
    return priorities[:limit]


def score_quiz(
    prefs: QuizPreferences, config: MatchingConfig = DEFAULT_MATCHING_CONFIG
) -> QuizResult:
    scores = compute_scores(prefs)
    return QuizResult(
        completed=True,
        lifestyle=classify(scores, config.location_order),
        priorities=derive_priorities(prefs, config.max_priorities),
        preferences=prefs,
        lifestyle_score=scores,
    )
