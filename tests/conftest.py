from datetime import datetime, timezone

import pytest

from courier.config import CourierSettings
from courier.dispatcher import ResponseDispatcher
from courier.models.error_context import StoredMessage
from courier.models.result import AuthorizationRequestContext, AuthorizationResult

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def utcnow(self) -> datetime:
        return self.now


class MockUserSession:
    """Records authorized clients, optionally failing."""

    def __init__(self, error: Exception | None = None):
        self.client_ids: list[str] = []
        self.error = error

    async def add_client_id(self, client_id: str) -> None:
        if self.error:
            raise self.error
        self.client_ids.append(client_id)


class StubErrorStore:
    """Error context store handing out predictable ids."""

    def __init__(self, ids: list[str] | None = None, error: Exception | None = None):
        self.messages: dict[str, StoredMessage] = {}
        self._ids = list(ids or ["e1", "e2", "e3"])
        self.error = error

    async def write(self, message: StoredMessage) -> str:
        if self.error:
            raise self.error
        message_id = self._ids.pop(0)
        self.messages[message_id] = message
        return message_id

    async def read(self, message_id: str) -> StoredMessage | None:
        return self.messages.pop(message_id, None)


class SetParameterAugmenter:
    def __init__(self, key: str, value: str, name: str | None = None):
        self.key = key
        self.value = value
        self.name = name or f"set-{key}-{value}"

    async def augment(self, result, parameters):
        parameters[self.key] = self.value


class FailingAugmenter:
    name = "failing"

    async def augment(self, result, parameters):
        raise RuntimeError("provider offline")


def make_request(**overrides) -> AuthorizationRequestContext:
    fields = {
        "client_id": "web-client",
        "redirect_uri": "https://client.example/cb",
        "response_mode": "query",
    }
    fields.update(overrides)
    return AuthorizationRequestContext(**fields)


def make_success(parameters=None, **request_overrides) -> AuthorizationResult:
    return AuthorizationResult.success(
        make_request(**request_overrides),
        parameters or {"code": "abc", "state": "xyz"},
    )


def make_error(
    error: str,
    description: str | None = None,
    redirect: bool = True,
    **request_overrides,
) -> AuthorizationResult:
    request = make_request(**request_overrides)
    return AuthorizationResult.failure(
        error,
        error_description=description,
        request=request,
        redirect_uri=request.redirect_uri if redirect else None,
    )


@pytest.fixture
def settings():
    return CourierSettings(
        _env_file=None,
        error_url="https://idp.example/home/error",
        error_id_parameter="id",
    )


@pytest.fixture
def user_session():
    return MockUserSession()


@pytest.fixture
def error_store():
    return StubErrorStore()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def make_dispatcher(settings, user_session, error_store, clock):
    def _make(augmenters=(), **overrides):
        collaborators = {
            "settings": settings,
            "user_session": user_session,
            "error_store": error_store,
            "clock": clock,
        }
        collaborators.update(overrides)
        return ResponseDispatcher(augmenters=augmenters, **collaborators)

    return _make
