import logging

from fastapi import Depends
from starlette.concurrency import run_in_threadpool

from app.database import FirestoreStore, StoreError, get_store
from app.models.measurement import Device

logger = logging.getLogger(__name__)


class DeviceService:
    """Read-only lookup of which devices belong to a user."""

    COLLECTION_NAME = "devices"

    def __init__(self, store: FirestoreStore):
        self.store = store

    async def get_devices(self, user_id: str) -> list[Device]:
        """A store failure is reported the same way as having no devices."""
        try:
            rows = await run_in_threadpool(
                self.store.find_by_field, self.COLLECTION_NAME, "user_id", user_id
            )
        except StoreError as e:
            logger.warning(f"Device lookup failed for user {user_id}: {e.message}")
            return []

        return [Device(id=str(row["id"]), user_id=user_id) for row in rows if row.get("id")]

    async def get_device_ids(self, user_id: str) -> list[str]:
        """Return the ids of devices owned by user_id, sorted and de-duplicated."""
        devices = await self.get_devices(user_id)
        return sorted({device.id for device in devices})


def get_device_service(store: FirestoreStore = Depends(get_store)) -> DeviceService:
    return DeviceService(store)
