"""
Authentication endpoints for registration, login and the current session.
Every endpoint answers with a SessionPayload carrying a freshly signed token.
"""
from fastapi import APIRouter, HTTPException, status, Depends
from app.models.session import SessionPayload
from app.models.user import RegisterUser, Login
from app.dependencies import get_current_user
from app.services.session_service import SessionService, get_session_service
from app.services.user_service import (
    UserAlreadyExistsError,
    InvalidCredentialsError,
    UserNotFoundError,
)

auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.post("/register", response_model=SessionPayload, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: RegisterUser,
    session_service: SessionService = Depends(get_session_service)
):
    """
    Register a new user and return the session payload.

    Passwords are hashed using bcrypt before storage.
    """
    try:
        return await session_service.register(user_data)
    except UserAlreadyExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )


@auth_router.post("/login", response_model=SessionPayload)
async def login(
    credentials: Login,
    session_service: SessionService = Depends(get_session_service)
):
    """
    Login with email and password, returns the session payload.

    Unknown emails and wrong passwords get the same response.
    """
    try:
        return await session_service.login(credentials)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


@auth_router.get("/me", response_model=SessionPayload)
async def get_current_user_info(
    current_user: dict = Depends(get_current_user),
    session_service: SessionService = Depends(get_session_service)
):
    """Return the authenticated user's profile with a new token and latest measurement."""
    try:
        return await session_service.current_user(current_user["user_id"])
    except UserNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
