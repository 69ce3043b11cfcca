import uuid

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from app.security import decode_access_token

security = HTTPBearer(auto_error=False)

INVALID_TOKEN_DETAIL = "Invalid authentication credentials"


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=INVALID_TOKEN_DETAIL,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def auth_middleware(request: Request, call_next):
    """Extract user_id from JWT token and set in request.state for rate limiting."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        try:
            payload = decode_access_token(auth_header.split(" ", 1)[1])
            user_id = payload.get("sub")
            if user_id:
                request.state.user_id = user_id
        except JWTError:
            pass

    return await call_next(request)


def verify_token(token: str) -> dict:
    """
    Verify a bearer token and return its claims.

    Bad signatures, expired tokens and subjects that are not UUIDs all raise the
    same 401, so callers learn nothing about why the token was refused.
    """
    try:
        payload = decode_access_token(token)
    except JWTError:
        raise _unauthorized()

    subject = payload.get("sub")
    try:
        payload["sub"] = str(uuid.UUID(str(subject)))
    except (TypeError, ValueError):
        raise _unauthorized()

    return payload


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security)
) -> dict:
    """Get current authenticated user from JWT token."""
    if credentials is None:
        raise _unauthorized()

    payload = verify_token(credentials.credentials)
    user_id: str = payload["sub"]
    email: str | None = payload.get("email")

    request.state.user_id = user_id
    return {"user_id": user_id, "email": email}
