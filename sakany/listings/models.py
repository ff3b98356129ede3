from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class PropertyStatus(str, Enum):
    pending = "pending"
    active = "active"
    approved = "approved"
    rejected = "rejected"
    inactive = "inactive"
    sold = "sold"
    rented = "rented"


def get_field(record: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a mapping or an attribute object, ``default`` if absent."""
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def as_number(value: Any) -> float | None:
    """Return ``value`` as a float when it is a real number, else ``None``."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value != value:  # NaN
        return None
    return float(value)


def _normalize_tags(values: list[str]) -> list[str]:
    seen: list[str] = []
    for v in values:
        tag = str(v).strip().lower()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class PropertyCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    property_type: str = Field(..., min_length=1, description="apartment, house, villa, ...")
    price: float = Field(..., ge=0)
    bedrooms: int = Field(default=0, ge=0)
    bathrooms: float = Field(default=0, ge=0)
    area: float = Field(..., gt=0, description="Square meters")
    location: str = Field(..., min_length=1)
    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    for_sale: bool = True
    for_rent: bool = False
    coordinates: Coordinates | None = None
    seller_name: str | None = None
    seller_phone: str | None = None

    @field_validator("property_type")
    @classmethod
    def _lower_type(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("amenities")
    @classmethod
    def _clean_amenities(cls, v: list[str]) -> list[str]:
        return _normalize_tags(v)


CLEARABLE_FIELDS = frozenset({"coordinates", "seller_name", "seller_phone"})


class PropertyUpdate(BaseModel):
    """Owner edits. Approval and visibility flags are not editable here."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    property_type: str | None = Field(default=None, min_length=1)
    price: float | None = Field(default=None, ge=0)
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: float | None = Field(default=None, ge=0)
    area: float | None = Field(default=None, gt=0)
    location: str | None = Field(default=None, min_length=1)
    amenities: list[str] | None = None
    images: list[str] | None = None
    for_sale: bool | None = None
    for_rent: bool | None = None
    coordinates: Coordinates | None = None
    seller_name: str | None = None
    seller_phone: str | None = None

    @field_validator("property_type")
    @classmethod
    def _lower_type(cls, v: str | None) -> str | None:
        return v.strip().lower() if v is not None else None

    @field_validator("amenities")
    @classmethod
    def _clean_amenities(cls, v: list[str] | None) -> list[str] | None:
        return _normalize_tags(v) if v is not None else None

    @model_validator(mode="after")
    def _no_cleared_fields(self) -> PropertyUpdate:
        # Omit a field to keep it; only the optional contact fields can be cleared.
        cleared = sorted(
            name
            for name in self.model_fields_set - CLEARABLE_FIELDS
            if getattr(self, name) is None
        )
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self


class PropertyRecord(PropertyCreate):
    """A stored listing, including the approval flags and ownership."""

    model_config = ConfigDict(extra="allow")

    id: str
    verified: bool = False
    published: bool = False
    featured: bool = False
    status: str = PropertyStatus.pending.value
    user_id: str | None = None
    user_email: str | None = None
    created_at: float | None = None
    updated_at: float | None = None

    @field_validator("status")
    @classmethod
    def _lower_status(cls, v: str) -> str:
        return v.strip().lower()


class OwnerStatusUpdate(BaseModel):
    status: PropertyStatus


SORT_FIELDS = ("created_at", "price", "area", "bedrooms", "bathrooms")


class SearchFilters(BaseModel):
    q: str | None = Field(default=None, description="Free text matched against title, description and location")
    location: str | None = None
    min_price: float | None = Field(default=None, ge=0)
    max_price: float | None = Field(default=None, ge=0)
    property_type: str | None = Field(default=None, description='"all" or empty means any type')
    min_bedrooms: int | None = Field(default=None, ge=0)
    min_bathrooms: float | None = Field(default=None, ge=0)
    min_area: float | None = Field(default=None, ge=0)
    max_area: float | None = Field(default=None, ge=0)
    for_sale: bool | None = None
    for_rent: bool | None = None
    amenities: list[str] = Field(default_factory=list)
    sort_by: str = "created_at"
    sort_direction: str = "desc"
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)

    @field_validator("amenities")
    @classmethod
    def _clean_amenities(cls, v: list[str]) -> list[str]:
        return _normalize_tags(v)

    @field_validator("sort_by")
    @classmethod
    def _known_sort_field(cls, v: str) -> str:
        return v if v in SORT_FIELDS else "created_at"

    @field_validator("sort_direction")
    @classmethod
    def _known_direction(cls, v: str) -> str:
        v = v.strip().lower()
        return v if v in ("asc", "desc") else "desc"


class SearchPage(BaseModel):
    properties: list[dict[str, Any]]
    total: int
    page: int
    page_size: int
    total_pages: int
