"""
Pending parse-review store.

Holds parsed-upload results awaiting user confirmation. Entries are keyed by
review id, scoped to the uploading user, and expire after a fixed TTL.
Confirming or rejecting a review evicts it.
"""

import threading
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from cvsmith.utils.config import load_generation_config


@dataclass
class PendingReview:
    """A parse result awaiting confirmation."""

    review_id: str
    user_id: str
    payload: Any
    expires_at: float


class PendingReviewStore:
    """
    Time-bounded keyed store for pending parse reviews.

    Attributes:
        ttl_seconds: Lifetime of each entry
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds is None:
            ttl_seconds = float(load_generation_config().review_store.ttl_s)
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")

        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, PendingReview] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def put(self, user_id: str, payload: Any) -> str:
        """Store a payload for user_id and return its new review id."""
        review_id = uuid.uuid4().hex
        with self._lock:
            self._entries[review_id] = PendingReview(
                review_id=review_id,
                user_id=user_id,
                payload=payload,
                expires_at=self._clock() + self.ttl_seconds,
            )
        return review_id

    def _live_entry(self, user_id: str, review_id: str) -> Optional[PendingReview]:
        # Caller holds the lock
        entry = self._entries.get(review_id)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[review_id]
            return None
        if entry.user_id != user_id:
            return None
        return entry

    def get(self, user_id: str, review_id: str) -> Optional[Any]:
        """Payload for the user's review, or None if missing, expired, or foreign."""
        with self._lock:
            entry = self._live_entry(user_id, review_id)
            return entry.payload if entry else None

    def _pop(self, user_id: str, review_id: str) -> Optional[Any]:
        with self._lock:
            entry = self._live_entry(user_id, review_id)
            if entry is None:
                return None
            del self._entries[review_id]
            return entry.payload

    def confirm(self, user_id: str, review_id: str) -> Optional[Any]:
        """Evict the review and return its payload for persistence."""
        return self._pop(user_id, review_id)

    def reject(self, user_id: str, review_id: str) -> Optional[Any]:
        """Evict the review, discarding its payload (returned for logging)."""
        return self._pop(user_id, review_id)

    def evict_expired(self) -> int:
        """Remove all expired entries and return how many were removed."""
        with self._lock:
            current = self._clock()
            expired = [rid for rid, e in self._entries.items() if e.expires_at <= current]
            for review_id in expired:
                del self._entries[review_id]
        return len(expired)
