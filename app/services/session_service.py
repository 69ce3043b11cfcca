"""
Session payload assembly.

Every identity-affecting operation (register, login, fetch-self, profile
update) ends here, so each response carries a freshly signed token and the
newest measurement known at the time of the call. Neither is cached.
"""
import logging

from fastapi import Depends

from app.models.session import SessionPayload
from app.models.user import Login, RegisterUser, UpdateProfile, UserRecord
from app.security import create_access_token, token_lifetime
from app.services.measurement_service import MeasurementService, get_measurement_service
from app.services.user_service import UserNotFoundError, UserService, get_user_service

logger = logging.getLogger(__name__)


class SessionService:
    """Builds the profile + token + latest measurement response."""

    def __init__(self, user_service: UserService, measurement_service: MeasurementService):
        self.user_service = user_service
        self.measurement_service = measurement_service

    async def build_payload(self, user: UserRecord) -> SessionPayload:
        token = create_access_token(str(user.id), user.email)
        latest = await self.measurement_service.get_latest_for_user(str(user.id))

        return SessionPayload(
            **user.profile().model_dump(),
            token=token,
            token_type="Bearer",
            expires_in=int(token_lifetime().total_seconds()),
            latest_measurement=latest,
        )

    async def register(self, user_data: RegisterUser) -> SessionPayload:
        user = await self.user_service.create_user(user_data)
        return await self.build_payload(user)

    async def login(self, credentials: Login) -> SessionPayload:
        user = await self.user_service.verify_user_credentials(credentials.email, credentials.password)
        logger.info(f"User {user.id} logged in")
        return await self.build_payload(user)

    async def current_user(self, user_id: str) -> SessionPayload:
        user = await self.user_service.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError("Account no longer exists.")
        return await self.build_payload(user)

    async def update_profile(self, user_id: str, update: UpdateProfile) -> SessionPayload:
        user = await self.user_service.update_profile(user_id, update)
        return await self.build_payload(user)


def get_session_service(
    user_service: UserService = Depends(get_user_service),
    measurement_service: MeasurementService = Depends(get_measurement_service),
) -> SessionService:
    return SessionService(user_service, measurement_service)
