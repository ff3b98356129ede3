from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

MAX_SELECTED_PRIORITIES = 3


class ResidenceType(str, Enum):
    apartment = "apartment"
    house = "house"
    villa = "villa"
    farm = "farm"


class FamilyStatus(str, Enum):
    single = "single"
    married = "married"
    couple = "couple"
    couple_planning_children = "couple_planning_children"
    couple_with_children = "couple_with_children"
    family_with_children = "family_with_children"


class Environment(str, Enum):
    urban = "urban"
    suburban = "suburban"
    rural = "rural"


class Commute(str, Enum):
    car = "car"
    public_transport = "public_transport"
    walking = "walking"
    cycling = "cycling"


class WorkStyle(str, Enum):
    office = "office"
    remote = "remote"
    rental = "rental"


class LocationTrend(str, Enum):
    established = "established"
    growing = "growing"
    convenience = "convenience"


def _clean_words(values: list[str]) -> list[str]:
    out: list[str] = []
    for v in values:
        word = str(v).strip().lower()
        if word and word not in out:
            out.append(word)
    return out


def _blank_answer(v: Any) -> Any:
    return v if isinstance(v, str) else ""


def _zero_if_unset(v: Any) -> Any:
    return 0 if v is None else v


def _empty_if_unset(v: Any) -> Any:
    return [] if v is None else v


class QuizPreferences(BaseModel):
    """
    Answers of the full lifestyle quiz.

    Categorical answers are free strings compared against the enums above;
    an unknown value is kept and simply matches no scoring rule.
    """

    residence_type: str = ""
    family_status: str = ""
    work_style: str = ""
    commute: str = ""
    environment: str = ""
    location: str = Field(default="", description="Neighbourhood trend: established, growing, convenience")
    budget: float = Field(default=0, description="0 means no budget given")
    bedrooms: int = Field(default=0, ge=0)
    outdoor_space: int | None = Field(default=None, ge=1, le=5)
    amenities: list[str] = Field(default_factory=list)
    priorities: list[str] = Field(default_factory=list)
    pets: bool | None = None

    @field_validator(
        "residence_type",
        "family_status",
        "work_style",
        "commute",
        "environment",
        "location",
        mode="before",
    )
    @classmethod
    def _unanswered_as_blank(cls, v: Any) -> Any:
        return _blank_answer(v)

    @field_validator("budget", "bedrooms", mode="before")
    @classmethod
    def _unanswered_as_zero(cls, v: Any) -> Any:
        return _zero_if_unset(v)

    @field_validator("amenities", "priorities", mode="before")
    @classmethod
    def _unanswered_as_empty(cls, v: Any) -> Any:
        return _empty_if_unset(v)

    @field_validator(
        "residence_type", "family_status", "work_style", "commute", "environment", "location"
    )
    @classmethod
    def _lower(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("amenities")
    @classmethod
    def _clean_amenities(cls, v: list[str]) -> list[str]:
        return _clean_words(v)

    @field_validator("priorities")
    @classmethod
    def _first_priorities(cls, v: list[str]) -> list[str]:
        # Extra selections are dropped, never rejected.
        return _clean_words(v)[:MAX_SELECTED_PRIORITIES]


class LifestyleScore(BaseModel):
    family: int = 0
    luxury: int = 0
    investment: int = 0
    urban: int = 0
    suburban: int = 0
    rural: int = 0


class QuizResult(BaseModel):
    completed: bool = True
    lifestyle: str
    priorities: list[str]
    preferences: QuizPreferences
    lifestyle_score: LifestyleScore


class SimpleQuizPreferences(BaseModel):
    """The three-question quiz: property type, household and budget ceiling."""

    residence_type: str = ""
    family_status: str = ""
    budget: float = Field(default=0, description="0 or less means no ceiling")

    @field_validator("residence_type", "family_status", mode="before")
    @classmethod
    def _unanswered_as_blank(cls, v: Any) -> Any:
        return _blank_answer(v)

    @field_validator("budget", mode="before")
    @classmethod
    def _unanswered_as_zero(cls, v: Any) -> Any:
        return _zero_if_unset(v)

    @field_validator("residence_type", "family_status")
    @classmethod
    def _lower(cls, v: str) -> str:
        return v.strip().lower()


class SimpleQuizMatch(BaseModel):
    properties: list[dict[str, Any]]
    total: int
    filters: dict[str, Any]
