"""Error context snapshots persisted for the error display surface."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ErrorContextRecord:
    """Details of an error that must be shown to the end user.

    Redirect fields are only populated when the client's redirect target
    is still meaningful, so the error page can offer a way back.
    """

    request_id: str
    error: str
    error_description: str | None = None
    ui_locales: str | None = None
    display_mode: str | None = None
    client_id: str | None = None
    redirect_uri: str | None = None
    response_mode: str | None = None
    parameters: dict[str, str] | None = None  # form_post only


@dataclass(frozen=True)
class StoredMessage:
    """Envelope written to the error context store."""

    data: ErrorContextRecord
    created: datetime = field(compare=False)
