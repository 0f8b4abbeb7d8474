"""
Rating storage for Cloud Firestore and an in-memory test implementation.

Both implementations order ratings newest first, breaking timestamp ties by
document id so that a cursor always identifies a single position.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Protocol, Union

from firebase_admin import exceptions as firebase_exceptions
from google.api_core import exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud.firestore_v1 import SERVER_TIMESTAMP, Query
from google.cloud.firestore_v1.base_query import FieldFilter

from event_ratings.errors import StoreError

logger = logging.getLogger(__name__)

Score = Union[int, float]

STORE_FAULTS = (
    exceptions.GoogleAPIError,
    auth_exceptions.GoogleAuthError,
    firebase_exceptions.FirebaseError,
)


class RatingStore(Protocol):
    """Operations the pagination engine needs from the rating collection."""

    def add(self, *, event_id: str, score: Score, uid: str) -> str:
        ...

    def resolve_cursor(self, rating_id: str) -> Optional[Any]:
        """Return an opaque cursor for ``rating_id`` or None if it does not exist."""
        ...

    def query(
        self,
        *,
        event_id: Optional[str] = None,
        start_after: Optional[Any] = None,
        limit: int,
    ) -> list["RatingRecord"]:
        ...


@dataclass
class RatingRecord:
    id: str
    event_id: str
    score: Score
    uid: str
    timestamp: Optional[datetime]

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "eventId": self.event_id,
            "score": self.score,
            "uid": self.uid,
            "timestamp": self.timestamp,
        }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class InMemoryRatingStore:
    """Simple in-memory rating collection for development and tests."""

    clock: Callable[[], datetime] = _utcnow
    records: Dict[str, RatingRecord] = field(default_factory=dict)

    def add(self, *, event_id: str, score: Score, uid: str) -> str:
        rating_id = uuid.uuid4().hex[:20]
        self.records[rating_id] = RatingRecord(
            id=rating_id,
            event_id=event_id,
            score=score,
            uid=uid,
            timestamp=self.clock(),
        )
        return rating_id

    def resolve_cursor(self, rating_id: str) -> Optional[RatingRecord]:
        return self.records.get(rating_id)

    def query(
        self,
        *,
        event_id: Optional[str] = None,
        start_after: Optional[RatingRecord] = None,
        limit: int,
    ) -> list[RatingRecord]:
        matches = [
            record
            for record in self.records.values()
            if event_id is None or record.event_id == event_id
        ]
        matches.sort(key=_sort_key, reverse=True)
        if start_after is not None:
            boundary = _sort_key(start_after)
            matches = [record for record in matches if _sort_key(record) < boundary]
        return matches[:limit]

    def reset(self) -> None:
        """Clear all stored ratings (useful in tests)."""
        self.records.clear()


def _sort_key(record: RatingRecord) -> tuple:
    return (record.timestamp, record.id)


class FirestoreRatingStore:
    """Firestore-backed rating collection."""

    def __init__(self, client, collection: str = "ratings"):
        self._client = client
        self._collection = collection

    def _collection_ref(self):
        return self._client.collection(self._collection)

    def add(self, *, event_id: str, score: Score, uid: str) -> str:
        data = {
            "eventId": event_id,
            "score": score,
            "uid": uid,
            "timestamp": SERVER_TIMESTAMP,
        }
        try:
            _, doc_ref = self._collection_ref().add(data)
        except STORE_FAULTS as exc:
            logger.exception("Failed to add rating for event %s", event_id)
            raise StoreError("Failed to save rating") from exc
        return doc_ref.id

    def resolve_cursor(self, rating_id: str):
        try:
            doc_ref = self._collection_ref().document(rating_id)
        except ValueError:
            # Ids containing "/" do not name a document in this collection.
            return None
        try:
            snapshot = doc_ref.get()
        except STORE_FAULTS as exc:
            logger.exception("Failed to resolve page token %s", rating_id)
            raise StoreError("Failed to read ratings") from exc
        return snapshot if snapshot.exists else None

    def query(
        self,
        *,
        event_id: Optional[str] = None,
        start_after=None,
        limit: int,
    ) -> list[RatingRecord]:
        query = self._collection_ref()
        if event_id is not None:
            query = query.where(filter=FieldFilter("eventId", "==", event_id))
        query = query.order_by("timestamp", direction=Query.DESCENDING)
        if start_after is not None:
            query = query.start_after(start_after)
        query = query.limit(limit)
        try:
            return [self._to_record(snapshot) for snapshot in query.stream()]
        except STORE_FAULTS as exc:
            logger.exception("Failed to query ratings (eventId=%s)", event_id)
            raise StoreError("Failed to read ratings") from exc

    @staticmethod
    def _to_record(snapshot) -> RatingRecord:
        data = snapshot.to_dict() or {}
        return RatingRecord(
            id=snapshot.id,
            event_id=data.get("eventId"),
            score=data.get("score"),
            uid=data.get("uid"),
            timestamp=data.get("timestamp"),
        )
