from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

import pandas as pd

from .models import SearchFilters, SearchPage, as_number, get_field
from .visibility import filter_by_visibility


def _text(df: pd.DataFrame, column: str) -> pd.Series:
    if column not in df.columns:
        return pd.Series("", index=df.index)
    return df[column].fillna("").astype(str).str.lower()


def _num(df: pd.DataFrame, column: str) -> pd.Series:
    """Numeric view of ``column``; anything that is not a real number becomes NaN."""
    if column not in df.columns:
        return pd.Series(float("nan"), index=df.index, dtype="float64")
    cleaned = df[column].apply(lambda v: None if isinstance(v, bool) else v)
    return pd.to_numeric(cleaned, errors="coerce").astype("float64")


def _flag(df: pd.DataFrame, column: str) -> pd.Series:
    if column not in df.columns:
        return pd.Series(False, index=df.index)
    return df[column].apply(lambda v: v is True)


def _as_row(record: Any) -> dict[str, Any]:
    if isinstance(record, Mapping):
        return dict(record)
    if hasattr(record, "model_dump"):
        return record.model_dump()
    return dict(vars(record))


def _has_all(values: Any, required: set[str]) -> bool:
    if not isinstance(values, (list, tuple, set)):
        return False
    return required <= {str(v).strip().lower() for v in values}


def _build_mask(df: pd.DataFrame, filters: SearchFilters) -> pd.Series:
    mask = pd.Series(True, index=df.index)

    if filters.q and filters.q.strip():
        q = filters.q.strip().lower()
        mask &= (
            _text(df, "title").str.contains(q, regex=False)
            | _text(df, "description").str.contains(q, regex=False)
            | _text(df, "location").str.contains(q, regex=False)
        )

    if filters.location and filters.location.strip():
        mask &= _text(df, "location").str.contains(filters.location.strip().lower(), regex=False)

    ptype = (filters.property_type or "").strip().lower()
    if ptype and ptype != "all":
        mask &= _text(df, "property_type") == ptype

    # NaN comparisons are False, so records missing a field drop out.
    if filters.min_price is not None:
        mask &= _num(df, "price") >= filters.min_price
    if filters.max_price is not None:
        mask &= _num(df, "price") <= filters.max_price
    if filters.min_bedrooms is not None:
        mask &= _num(df, "bedrooms") >= filters.min_bedrooms
    if filters.min_bathrooms is not None:
        mask &= _num(df, "bathrooms") >= filters.min_bathrooms
    if filters.min_area is not None:
        mask &= _num(df, "area") >= filters.min_area
    if filters.max_area is not None:
        mask &= _num(df, "area") <= filters.max_area

    if filters.for_sale is not None:
        mask &= _flag(df, "for_sale") == filters.for_sale
    if filters.for_rent is not None:
        mask &= _flag(df, "for_rent") == filters.for_rent

    if filters.amenities:
        required = set(filters.amenities)
        if "amenities" in df.columns:
            mask &= df["amenities"].apply(lambda a: _has_all(a, required))
        else:
            mask &= False

    return mask


def search_properties(records: Iterable[Any], filters: SearchFilters) -> SearchPage:
    """
    Filter, sort and paginate the publicly visible subset of ``records``.

    Sorting is stable and puts records without the sort field last, whatever
    the direction.
    """
    visible = filter_by_visibility(records)
    page, page_size = filters.page, filters.page_size

    if not visible:
        return SearchPage(properties=[], total=0, page=page, page_size=page_size, total_pages=0)

    df = pd.DataFrame.from_records([_as_row(r) for r in visible])
    mask = _build_mask(df, filters)

    keys = _num(df, filters.sort_by)[mask]
    ordered = keys.sort_values(
        ascending=filters.sort_direction == "asc",
        kind="mergesort",
        na_position="last",
    ).index

    total = len(ordered)
    start = (page - 1) * page_size
    window = ordered[start : start + page_size]

    return SearchPage(
        properties=[visible[i] for i in window],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size),
    )


def featured_properties(records: Iterable[Any], limit: int = 6) -> list[Any]:
    featured = [p for p in filter_by_visibility(records) if get_field(p, "featured") is True]
    return featured[:limit]


def recent_properties(records: Iterable[Any], limit: int = 3) -> list[Any]:
    """Visible records, newest ``created_at`` first; undated records go last."""
    visible = filter_by_visibility(records)
    dated = sorted(
        (p for p in visible if as_number(get_field(p, "created_at")) is not None),
        key=lambda p: as_number(get_field(p, "created_at")),
        reverse=True,
    )
    undated = [p for p in visible if as_number(get_field(p, "created_at")) is None]
    return (dated + undated)[:limit]


def listing_metadata(records: Iterable[Any]) -> dict[str, list[str]]:
    """Distinct property types, amenities and locations across visible records."""
    visible = filter_by_visibility(records)
    types: set[str] = set()
    amenities: set[str] = set()
    locations: set[str] = set()
    for p in visible:
        ptype = get_field(p, "property_type")
        if isinstance(ptype, str) and ptype.strip():
            types.add(ptype.strip().lower())
        loc = get_field(p, "location")
        if isinstance(loc, str) and loc.strip():
            locations.add(loc.strip())
        tags = get_field(p, "amenities")
        if isinstance(tags, (list, tuple)):
            amenities.update(str(t).strip().lower() for t in tags if str(t).strip())
    return {
        "property_types": sorted(types),
        "amenities": sorted(amenities),
        "locations": sorted(locations),
    }
