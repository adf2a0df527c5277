"""Exception hierarchy for authorization response delivery.

Every failure raised while dispatching a response derives from
``CourierError`` so callers can surface a single generic server error.
"""

from __future__ import annotations


class CourierError(Exception):
    """Base exception for all response delivery errors."""

    pass


class InvalidAuthorizationResultError(CourierError, ValueError):
    """Raised when an authorization result mixes success and error fields."""

    pass


class UnsupportedDeliveryModeError(CourierError):
    """Raised when the response mode is not query, fragment or form_post.

    Indicates a malformed request state. Never delivered to the browser
    as a redirect.
    """

    pass


class AugmentationError(CourierError):
    """Raised when a registered query augmenter fails.

    The underlying exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, augmenter: str | None = None):
        super().__init__(message)
        self.augmenter = augmenter


class StoreUnavailableError(CourierError):
    """Raised when the error context record cannot be persisted."""

    pass


class SessionNotificationError(CourierError):
    """Raised when the user session rejects the authorized client."""

    pass
