import logging
import os
from typing import Any

from fastapi import Depends
from google.api_core import exceptions as google_exceptions
from google.auth.credentials import AnonymousCredentials
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the data store fails or rejects a call."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def get_db() -> firestore.Client:
    """Get Firestore client. Uses emulator if FIRESTORE_EMULATOR_HOST is set."""
    emulator_host = os.getenv("FIRESTORE_EMULATOR_HOST")

    if emulator_host:
        project_id = os.getenv("GCP_PROJECT_ID", "test-project")
        return firestore.Client(project=project_id, credentials=AnonymousCredentials())

    project_id = os.getenv("GCP_PROJECT_ID")
    if project_id:
        return firestore.Client(project=project_id)

    return firestore.Client()


def _store_error(e: google_exceptions.GoogleAPICallError, collection: str) -> StoreError:
    logger.warning(f"Firestore call on {collection} failed: status={e.code} message={e.message}")
    return StoreError(e.message or str(e), status_code=e.code)


def _to_row(doc) -> dict[str, Any]:
    row = doc.to_dict() or {}
    row["id"] = doc.id
    return row


class FirestoreStore:
    """
    Generic row-oriented access to Firestore collections.

    Every method is blocking; async callers wrap them in run_in_threadpool.
    Any Google API failure is re-raised as StoreError.
    """

    def __init__(self, db: firestore.Client):
        self.db = db

    def find_by_field(
        self,
        collection: str,
        field: str,
        value: Any,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        query = self.db.collection(collection).where(filter=FieldFilter(field, "==", value))
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        if limit is not None:
            query = query.limit(limit)

        try:
            return [_to_row(doc) for doc in query.stream()]
        except google_exceptions.GoogleAPICallError as e:
            raise _store_error(e, collection) from e

    def insert(self, collection: str, row: dict[str, Any]) -> dict[str, Any]:
        data = dict(row)
        ref = self.db.collection(collection)
        doc_ref = ref.document(str(data["id"])) if data.get("id") else ref.document()
        # The id is stored as a field too so rows can be matched on it
        data["id"] = doc_ref.id

        try:
            doc_ref.set(data)
        except google_exceptions.GoogleAPICallError as e:
            raise _store_error(e, collection) from e

        return data

    def create(self, collection: str, key: str, row: dict[str, Any]) -> dict[str, Any]:
        """Write a document under `key` only if none exists. An existing key raises StoreError 409."""
        try:
            self.db.collection(collection).document(key).create(row)
        except google_exceptions.Conflict as e:
            raise StoreError(f"{collection} key already exists", status_code=409) from e
        except google_exceptions.GoogleAPICallError as e:
            raise _store_error(e, collection) from e
        return dict(row)

    def delete(self, collection: str, key: str) -> None:
        try:
            self.db.collection(collection).document(key).delete()
        except google_exceptions.GoogleAPICallError as e:
            raise _store_error(e, collection) from e

    def update_where(
        self,
        collection: str,
        field: str,
        value: Any,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        """Merge `changes` into the first document matching field == value."""
        query = self.db.collection(collection).where(filter=FieldFilter(field, "==", value)).limit(1)

        try:
            docs = list(query.stream())
            if not docs:
                raise StoreError(f"No {collection} row where {field} matches", status_code=404)
            doc = docs[0]
            doc.reference.update(changes)
        except google_exceptions.GoogleAPICallError as e:
            raise _store_error(e, collection) from e

        row = _to_row(doc)
        row.update(changes)
        return row


def get_store(db: firestore.Client = Depends(get_db)) -> FirestoreStore:
    return FirestoreStore(db)
