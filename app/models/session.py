from pydantic import Field
from typing import Optional

from .measurement import Measurement
from .user import UserProfile


class SessionPayload(UserProfile):
    """Profile plus a freshly issued token and the newest reading across the user's devices."""
    token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="Bearer", description="Token type")
    expires_in: int = Field(..., description="Token expiration time in seconds")
    latest_measurement: Optional[Measurement] = Field(
        None, description="Most recent measurement, null when the user has none"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "token_type": "Bearer",
                "expires_in": 43200,
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "first_name": "Ada",
                "last_name": "Lovelace",
                "email": "ada@example.com",
                "phone_number": "0612345678",
                "gender": "female",
                "age": 36,
                "height": 165.0,
                "weight": None,
                "blood_type": "O+",
                "created_at": "2026-01-10T10:30:00Z",
                "updated_at": None,
                "latest_measurement": {
                    "id": "9f2c4e1a-6b0d-4c3e-8a51-2f7d9e0b1c44",
                    "value": "{\"bpm\": 72}",
                    "device_id": "HW-00A1",
                    "created_at": "2026-01-10T10:29:00Z",
                    "activity_id": None
                }
            }
        }
    }
