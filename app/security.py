"""
Password hashing and session token issuance.

Hashes use bcrypt, whose output embeds the cost factor and a per-call salt.
bcrypt reads at most 72 bytes, so longer passwords are reduced to the base64
of their SHA-256 digest first.
Tokens are HS256 JWTs signed with the process-wide secret.
"""
import base64
import hashlib
import logging
import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import jwt

from app.config import get_settings

logger = logging.getLogger(__name__)


BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    """UTF-8 encode, pre-hashing anything bcrypt would reject. Raises UnicodeEncodeError."""
    encoded = password.encode('utf-8')
    if len(encoded) > BCRYPT_MAX_BYTES:
        return base64.b64encode(hashlib.sha256(encoded).digest())
    return encoded


def hash_password(password: str) -> str:
    """
    Hash a plaintext password. Empty strings are hashed like any other.

    Only fails on text that cannot be UTF-8 encoded (e.g. lone surrogates).
    """
    rounds = get_settings().bcrypt_rounds
    password_hash = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=rounds))
    return password_hash.decode('utf-8')


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a password against a stored hash. Malformed hashes never match."""
    if not password_hash:
        return False
    try:
        candidate = _password_bytes(password)
    except UnicodeEncodeError:
        logger.warning("Supplied password is not valid UTF-8")
        return False
    try:
        return bcrypt.checkpw(candidate, password_hash.encode('utf-8'))
    except (ValueError, TypeError):
        logger.warning("Stored password hash is malformed")
        return False


_dummy_hash: str | None = None


def dummy_verify(password: str) -> bool:
    """Spend the same bcrypt work as a real check when there is no stored hash."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = hash_password(uuid.uuid4().hex)
    verify_password(password, _dummy_hash)
    return False


def token_lifetime() -> timedelta:
    return timedelta(hours=get_settings().access_token_expire_hours)


def create_access_token(user_id: str, email: str, expires_delta: timedelta | None = None) -> str:
    """Create a signed JWT carrying sub/email claims that expires after the configured window."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else token_lifetime())

    to_encode = {
        "sub": str(user_id),
        "email": email,
        "iat": now,
        "exp": expire,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Decode and validate signature and expiry. Raises jose.JWTError on failure."""
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
