from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ReportStatus(str, Enum):
    pending = "pending"
    resolved = "resolved"


class ReportCreate(BaseModel):
    property_id: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1, max_length=200)
    details: str = Field(default="", max_length=5000)


class ReportReview(BaseModel):
    status: ReportStatus
    admin_notes: str = Field(default="", max_length=5000)


class NotifyOwnerRequest(BaseModel):
    report_id: str = Field(..., min_length=1)
    admin_notes: str | None = Field(
        default=None, description="Defaults to the notes saved on the report"
    )
