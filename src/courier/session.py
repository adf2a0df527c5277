"""Collaborators the dispatcher calls out to: user session and clock."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class UserSession(Protocol):
    """Authenticated user session of the authorization server."""

    async def add_client_id(self, client_id: str) -> None:
        """Record that ``client_id`` is now authorized in this session.

        The list of authorized clients drives coordinated sign-out.
        """
        ...


class Clock(Protocol):
    def utcnow(self) -> datetime:
        ...


class SystemClock:
    """Clock backed by the system time, always timezone-aware UTC."""

    def utcnow(self) -> datetime:
        return datetime.now(timezone.utc)
