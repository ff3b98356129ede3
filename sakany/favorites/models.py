from __future__ import annotations

from pydantic import BaseModel, Field


class FavoriteCreate(BaseModel):
    property_id: str = Field(..., min_length=1)
