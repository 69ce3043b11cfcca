import asyncio
import logging
from typing import Optional

from fastapi import Depends
from starlette.concurrency import run_in_threadpool

from app.database import FirestoreStore, get_store
from app.models.measurement import Measurement
from app.services.device_service import DeviceService, get_device_service

logger = logging.getLogger(__name__)


class MeasurementService:
    """Finds the newest measurement across every device a user owns."""

    COLLECTION_NAME = "measurements"

    def __init__(self, store: FirestoreStore, device_service: DeviceService):
        self.store = store
        self.device_service = device_service

    async def get_latest_for_device(self, device_id: str) -> Optional[Measurement]:
        rows = await run_in_threadpool(
            self.store.find_by_field,
            self.COLLECTION_NAME,
            "device_id",
            device_id,
            order_by="created_at",
            descending=True,
            limit=1,
        )
        if not rows:
            return None
        return Measurement(**rows[0])

    @staticmethod
    def pick_latest(candidates: list[Optional[Measurement]]) -> Optional[Measurement]:
        """
        Return the candidate with the greatest created_at.

        Ties keep the earliest candidate in the list, so the result is stable
        for a given device order.
        """
        latest: Optional[Measurement] = None
        for candidate in candidates:
            if candidate is None:
                continue
            if latest is None or candidate.created_at > latest.created_at:
                latest = candidate
        return latest

    async def get_latest_for_user(self, user_id: str) -> Optional[Measurement]:
        """
        Query every device of the user concurrently and reduce to the newest reading.

        All per-device queries are awaited before reducing. If any of them failed
        the first failure is raised and no partial answer is returned.
        """
        device_ids = await self.device_service.get_device_ids(user_id)
        if not device_ids:
            return None

        results = await asyncio.gather(
            *(self.get_latest_for_device(device_id) for device_id in device_ids),
            return_exceptions=True,
        )

        for device_id, result in zip(device_ids, results):
            if isinstance(result, BaseException):
                logger.error(f"Latest measurement query failed for device {device_id}: {result}")
                raise result

        return self.pick_latest(results)


def get_measurement_service(
    store: FirestoreStore = Depends(get_store),
    device_service: DeviceService = Depends(get_device_service),
) -> MeasurementService:
    return MeasurementService(store, device_service)
