"""Persistence of error context records for the error display surface.

The dispatcher only ever writes; the error page reads the record back
once using the opaque id it receives in its query string.
"""

from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from typing import Protocol

from courier.models.error_context import ErrorContextRecord, StoredMessage
from courier.models.errors import StoreUnavailableError
from courier.session import Clock, SystemClock

logger = logging.getLogger(__name__)


class ErrorContextStore(Protocol):
    """Short-lived keyed storage for error context messages."""

    async def write(self, message: StoredMessage) -> str:
        """Persist ``message`` and return its opaque id."""
        ...

    async def read(self, message_id: str) -> StoredMessage | None:
        """Return the message for ``message_id``, or None if unknown/expired."""
        ...


class InMemoryErrorContextStore:
    """Process-local store with read-once semantics and a fixed lifetime.

    Suitable for a single worker and for tests. Expired entries are
    dropped lazily on access.
    """

    def __init__(
        self,
        lifetime: timedelta = timedelta(minutes=5),
        clock: Clock | None = None,
    ) -> None:
        self.lifetime = lifetime
        self._clock = clock or SystemClock()
        self._messages: dict[str, StoredMessage] = {}

    def __len__(self) -> int:
        return len(self._messages)

    async def write(self, message: StoredMessage) -> str:
        self._purge_expired()
        message_id = secrets.token_urlsafe(24)
        self._messages[message_id] = message
        return message_id

    async def read(self, message_id: str) -> StoredMessage | None:
        message = self._messages.pop(message_id, None)
        if message is None:
            return None
        if self._is_expired(message):
            logger.debug(f"Error context {message_id} expired")
            return None
        return message

    def _is_expired(self, message: StoredMessage) -> bool:
        return self._clock.utcnow() - message.created > self.lifetime

    def _purge_expired(self) -> None:
        expired = [
            message_id
            for message_id, message in self._messages.items()
            if self._is_expired(message)
        ]
        for message_id in expired:
            del self._messages[message_id]


class ErrorContextStoreAdapter:
    """Timestamps records and turns store failures into StoreUnavailableError."""

    def __init__(self, store: ErrorContextStore, clock: Clock):
        self._store = store
        self._clock = clock

    async def write(self, record: ErrorContextRecord) -> str:
        """Persist ``record`` and return the id the error page will use.

        Raises:
            StoreUnavailableError: If the store fails or returns no id
        """
        message = StoredMessage(data=record, created=self._clock.utcnow())
        try:
            message_id = await self._store.write(message)
        except Exception as e:
            raise StoreUnavailableError(
                f"Failed to persist error context {record.request_id}: {e}"
            ) from e

        if not message_id:
            raise StoreUnavailableError(
                f"Error context store returned no id for {record.request_id}"
            )

        logger.debug(f"Persisted error context {record.request_id} as {message_id}")
        return message_id
