import hashlib
import logging
import uuid
from datetime import datetime, timezone

from fastapi import Depends
from starlette.concurrency import run_in_threadpool

from app.database import FirestoreStore, StoreError, get_store
from app.models.user import PROFILE_SCHEMA_VERSION, RegisterUser, UpdateProfile, UserRecord
from app.security import dummy_verify, hash_password, verify_password

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials."
EMAIL_EXISTS_MESSAGE = "Email already exists."


def email_key(email: str) -> str:
    """Document key reserving an email. Exact match, so case is kept."""
    return hashlib.sha256(email.encode("utf-8")).hexdigest()


class UserNotFoundError(Exception):
    pass


class UserAlreadyExistsError(Exception):
    pass


class InvalidCredentialsError(Exception):
    pass


class NoFieldsToUpdateError(Exception):
    pass


class UserService:
    """Service for user-related operations."""

    COLLECTION_NAME = "users"
    EMAIL_COLLECTION_NAME = "user_emails"

    def __init__(self, store: FirestoreStore):
        self.store = store

    async def get_user_by_email(self, email: str) -> UserRecord | None:
        """Get user by email address (exact match)."""
        rows = await run_in_threadpool(
            self.store.find_by_field, self.COLLECTION_NAME, "email", email, limit=1
        )
        if not rows:
            return None
        return UserRecord.from_document(rows[0])

    async def get_user_by_id(self, user_id: str) -> UserRecord | None:
        """Get user by ID."""
        rows = await run_in_threadpool(
            self.store.find_by_field, self.COLLECTION_NAME, "id", str(user_id), limit=1
        )
        if not rows:
            return None
        return UserRecord.from_document(rows[0])

    async def create_user(self, user_data: RegisterUser) -> UserRecord:
        """Create a new user with hashed password. Nothing is written if the email is taken."""
        if await self.get_user_by_email(user_data.email):
            raise UserAlreadyExistsError(EMAIL_EXISTS_MESSAGE)

        user_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        password_hash = await run_in_threadpool(hash_password, user_data.password)

        user_doc = {
            "id": user_id,
            "first_name": user_data.first_name,
            "last_name": user_data.last_name,
            "email": user_data.email,
            "phone_number": user_data.phone_number,
            "gender": user_data.gender,
            "age": user_data.age,
            "height": None,
            "weight": None,
            "blood_type": None,
            "password_hash": password_hash,
            "created_at": now,
            "updated_at": None,
            "schema_version": PROFILE_SCHEMA_VERSION,
        }
        await self._reserve_email(user_data.email, user_id)
        try:
            stored = await run_in_threadpool(self.store.insert, self.COLLECTION_NAME, user_doc)
        except StoreError:
            await self._release_email(user_data.email, user_id)
            raise
        logger.info(f"Registered user {user_id}")
        return UserRecord.from_document(stored)

    async def _reserve_email(self, email: str, user_id: str) -> None:
        """Claim the email atomically, so concurrent registrations cannot both succeed."""
        try:
            await run_in_threadpool(
                self.store.create, self.EMAIL_COLLECTION_NAME, email_key(email), {"user_id": user_id}
            )
        except StoreError as e:
            if e.status_code == 409:
                raise UserAlreadyExistsError(EMAIL_EXISTS_MESSAGE) from e
            raise

    async def _release_email(self, email: str, user_id: str) -> None:
        try:
            await run_in_threadpool(self.store.delete, self.EMAIL_COLLECTION_NAME, email_key(email))
        except StoreError as e:
            logger.error(f"Could not release email reservation for user {user_id}: {e.message}")

    async def verify_user_credentials(self, email: str, password: str) -> UserRecord:
        """
        Verify user credentials and return the user.

        Unknown email and wrong password raise the same error with the same message.
        """
        user = await self.get_user_by_email(email)

        if user is None:
            # Same bcrypt cost as a wrong password
            await run_in_threadpool(dummy_verify, password)
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        if not await run_in_threadpool(verify_password, password, user.password_hash):
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        return user

    async def update_profile(self, user_id: str, update: UpdateProfile) -> UserRecord:
        """Apply only the supplied fields. Raises NoFieldsToUpdateError when none are set."""
        changes = update.changes()
        if not changes:
            raise NoFieldsToUpdateError("No fields to update.")

        existing = await self.get_user_by_id(user_id)
        if existing is None:
            raise UserNotFoundError("Account no longer exists.")

        if existing.schema_version < PROFILE_SCHEMA_VERSION:
            # Rewrite legacy columns under their current names
            changes.setdefault("phone_number", existing.phone_number)
            changes.setdefault("password_hash", existing.password_hash)

        changes["updated_at"] = datetime.now(timezone.utc)
        changes["schema_version"] = PROFILE_SCHEMA_VERSION
        row = await run_in_threadpool(
            self.store.update_where, self.COLLECTION_NAME, "id", str(user_id), changes
        )
        logger.info(f"Updated profile fields {sorted(update.changes())} for user {user_id}")
        return UserRecord.from_document(row)


def get_user_service(store: FirestoreStore = Depends(get_store)) -> UserService:
    return UserService(store)
