"""Process-wide settings loaded from the environment."""
import os
from dataclasses import dataclass, field
from typing import Optional


class ConfigurationError(RuntimeError):
    pass


# Fixed: tokens are symmetric HMAC signatures valid for twelve hours
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_HOURS = 12


@dataclass(frozen=True)
class Settings:
    """Immutable settings. The JWT secret is kept out of repr()."""
    jwt_secret: str = field(repr=False)
    jwt_algorithm: str = field(default=JWT_ALGORITHM, init=False)
    access_token_expire_hours: int = field(default=ACCESS_TOKEN_EXPIRE_HOURS, init=False)
    bcrypt_rounds: int = 12


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Load settings once and cache them for the lifetime of the process.

    Raises ConfigurationError when JWT_SECRET is missing, which aborts startup.
    """
    global _settings
    if _settings:
        return _settings

    secret = os.getenv("JWT_SECRET", "")
    if not secret.strip():
        raise ConfigurationError("JWT_SECRET environment variable is not set")

    _settings = Settings(
        jwt_secret=secret,
        bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
    )
    return _settings
