"""
Models package - organizes all Pydantic models.

User models (user.py):
- RegisterUser: For registering users
- Login: For authentication requests
- UpdateProfile: Partial profile update
- UserProfile: Public profile fields
- UserRecord: Stored user, including the excluded password hash

Measurement models (measurement.py):
- Device: Device ownership row
- Measurement: A single biometric reading

Session models (session.py):
- SessionPayload: Profile + token + latest measurement response
"""
from .user import RegisterUser, Login, UpdateProfile, UserProfile, UserRecord
from .measurement import Device, Measurement
from .session import SessionPayload

__all__ = [
    # User models
    "RegisterUser",
    "Login",
    "UpdateProfile",
    "UserProfile",
    "UserRecord",
    # Measurement models
    "Device",
    "Measurement",
    # Session models
    "SessionPayload",
]
