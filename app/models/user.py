from pydantic import BaseModel, Field, EmailStr, field_validator
from typing import Any, Optional
import uuid
from datetime import datetime, timezone

PROFILE_SCHEMA_VERSION = 2

PHONE_PATTERN = r"^\d{8,20}$"


class RegisterUser(BaseModel):
    """Model for registering a new user."""
    first_name: str = Field(..., min_length=1, max_length=100, description="First name")
    last_name: str = Field(..., min_length=1, max_length=100, description="Last name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., max_length=72, description="User password")
    phone_number: str = Field(..., pattern=PHONE_PATTERN, description="Contact number, digits only")
    gender: str = Field(..., min_length=1, max_length=20, description="Gender")
    age: int = Field(..., ge=1, le=120, description="Age in years")

    @field_validator('password')
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        """bcrypt only accepts up to 72 bytes of input."""
        if len(v.encode('utf-8')) > 72:
            raise ValueError('Password must be at most 72 bytes when UTF-8 encoded')
        return v

    model_config = {
        "json_schema_extra": {
            "example": {
                "first_name": "Ada",
                "last_name": "Lovelace",
                "email": "ada@example.com",
                "password": "SecurePassword123!",
                "phone_number": "0612345678",
                "gender": "female",
                "age": 36
            }
        }
    }


class Login(BaseModel):
    """Login request model."""
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "ada@example.com",
                "password": "SecurePassword123!"
            }
        }
    }


class UpdateProfile(BaseModel):
    """Partial profile update. Omitted or null fields are left untouched."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    gender: Optional[str] = Field(None, min_length=1, max_length=20)
    age: Optional[int] = Field(None, ge=1, le=120)
    height: Optional[float] = Field(None, gt=0, le=300, description="Height in centimetres")
    weight: Optional[float] = Field(None, gt=0, le=700, description="Weight in kilograms")
    blood_type: Optional[str] = Field(None, max_length=10)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class UserProfile(BaseModel):
    """Public profile fields. Never carries credentials."""
    id: uuid.UUID = Field(..., description="User unique identifier")
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[int] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    blood_type: Optional[str] = None
    created_at: datetime = Field(..., description="Account creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")


class UserRecord(UserProfile):
    """Stored user (password hash excluded from every serialisation)."""
    schema_version: int = Field(PROFILE_SCHEMA_VERSION, exclude=True)
    password_hash: str = Field("", exclude=True, repr=False)

    @classmethod
    def from_document(cls, row: dict[str, Any]) -> "UserRecord":
        """
        Build a canonical record from a stored row.

        Version 1 rows kept the phone as an integer under `number` and the hash
        under `password`; they are mapped onto the version 2 field names.
        """
        data = dict(row)
        data.setdefault("schema_version", 1)
        if data["schema_version"] < PROFILE_SCHEMA_VERSION:
            if "phone_number" not in data and data.get("number") is not None:
                data["phone_number"] = str(data["number"])
            if "password_hash" not in data and data.get("password"):
                data["password_hash"] = data["password"]
        elif isinstance(data.get("phone_number"), int):
            data["phone_number"] = str(data["phone_number"])

        data["password_hash"] = data.get("password_hash") or ""
        for key in ("created_at", "updated_at"):
            value = data.get(key)
            if isinstance(value, datetime) and value.tzinfo is None:
                data[key] = value.replace(tzinfo=timezone.utc)

        return cls.model_validate(data)

    def profile(self) -> UserProfile:
        return UserProfile(**self.model_dump())
