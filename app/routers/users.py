"""
Profile endpoints for the authenticated user.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from app.dependencies import get_current_user
from app.models.session import SessionPayload
from app.models.user import UpdateProfile
from app.services.session_service import SessionService, get_session_service
from app.services.user_service import NoFieldsToUpdateError, UserNotFoundError

users_router = APIRouter(prefix="/users", tags=["users"])


@users_router.put(
    "/me",
    response_model=SessionPayload,
    summary="Update own profile",
    description="""
    Partially update the authenticated user's profile.

    Only fields present in the body are changed; omitted fields keep their
    current value. At least one field must be supplied.

    The response is a full session payload with a new token and the latest
    measurement, reflecting the profile just written.
    """
)
async def update_me(
    update: UpdateProfile,
    current_user: dict = Depends(get_current_user),
    session_service: SessionService = Depends(get_session_service)
):
    try:
        return await session_service.update_profile(current_user["user_id"], update)
    except NoFieldsToUpdateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except UserNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
