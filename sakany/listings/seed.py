from __future__ import annotations

import logging
import sys
import time
import uuid
from pathlib import Path
from typing import Any, List

import pandas as pd
from pydantic import ValidationError

from .models import PropertyRecord
from .store import load_properties

logger = logging.getLogger(__name__)

LIST_COLUMNS: List[str] = ["amenities", "images"]
BOOL_COLUMNS: List[str] = ["for_sale", "for_rent", "verified", "published", "featured"]


def _split_list(value: Any) -> list[str]:
    """CSV cells hold lists as ``"pool;gym"``; JSON already has real lists."""
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return []
    return [part.strip() for part in str(value).split(";") if part.strip()]


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return False
    return str(value).strip().lower() in ("true", "1", "yes", "y")


def read_seed_frame(path: Path) -> pd.DataFrame:
    if path.suffix.lower() == ".json":
        return pd.read_json(path, orient="records", dtype=False)
    return pd.read_csv(path)


def frame_to_records(df: pd.DataFrame) -> list[dict[str, Any]]:
    """
    Turn a seed frame into validated property records.

    Rows that fail validation are logged and skipped. Missing ids and
    timestamps are generated; approval flags are kept as given.
    """
    df = df.astype(object).where(pd.notna(df), None)
    records: list[dict[str, Any]] = []
    now = time.time()

    for position, row in enumerate(df.to_dict(orient="records")):
        row = {k: v for k, v in row.items() if v is not None}
        for col in LIST_COLUMNS:
            row[col] = _split_list(row.get(col))
        for col in BOOL_COLUMNS:
            if col in row:
                row[col] = _to_bool(row[col])
        if "lat" in row and "lng" in row:
            row["coordinates"] = {"lat": row.pop("lat"), "lng": row.pop("lng")}
        row.setdefault("id", uuid.uuid4().hex)
        row["id"] = str(row["id"])
        row.setdefault("created_at", now)
        row.setdefault("updated_at", row["created_at"])

        try:
            record = PropertyRecord.model_validate(row)
        except ValidationError as exc:
            logger.warning("Skipping seed row %d: %s", position, exc.errors()[0].get("msg"))
            continue
        records.append(record.model_dump())

    return records


def load_seed_file(path: Path) -> int:
    """Read ``path`` (CSV or JSON) into the property store and return the count."""
    records = frame_to_records(read_seed_frame(path))
    count = load_properties(records)
    logger.info("Loaded %d seed properties from %s", count, path)
    return count


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) != 2:
        print("usage: python -m sakany.listings.seed PATH")
        sys.exit(2)
    seed_path = Path(sys.argv[1])
    records = frame_to_records(read_seed_frame(seed_path))
    print(f"Validated {len(records)} properties from: {seed_path}")
