"""
Device and measurement models.

Measurements are written by device ingestion; this service only reads them.
"""
from pydantic import BaseModel, Field, field_validator
from datetime import datetime, timezone
from typing import Optional


class Device(BaseModel):
    """A wearable registered to exactly one user."""
    id: str = Field(..., description="Vendor-assigned device identifier")
    user_id: str = Field(..., description="Owning user id")


class Measurement(BaseModel):
    """A single biometric reading."""
    id: str
    value: str = Field(..., description="Serialized sensor reading")
    device_id: Optional[str] = None
    created_at: datetime
    activity_id: Optional[int] = None

    @field_validator('created_at')
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": "9f2c4e1a-6b0d-4c3e-8a51-2f7d9e0b1c44",
                "value": "{\"bpm\": 72}",
                "device_id": "HW-00A1",
                "created_at": "2026-01-08T08:30:00Z",
                "activity_id": None
            }
        }
    }
