"""Authorization outcome models handed to the response dispatcher.

Contains the echo of the original authorization request, the computed
result (issued artifacts or an error) and the enumerations used while
deciding how that result travels back to the client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from courier.models.errors import (
    InvalidAuthorizationResultError,
    UnsupportedDeliveryModeError,
)


class DeliveryMode(str, Enum):
    """Channel used to return response parameters to the client."""

    QUERY = "query"
    FRAGMENT = "fragment"
    FORM_POST = "form_post"

    @classmethod
    def parse(cls, value: str | DeliveryMode | None) -> DeliveryMode:
        """Resolve a raw ``response_mode`` value.

        Raises:
            UnsupportedDeliveryModeError: If the value is missing or unknown
        """
        try:
            return cls(value)
        except ValueError as e:
            raise UnsupportedDeliveryModeError(
                f"Unsupported response mode: {value!r}"
            ) from e


class ErrorDisposition(str, Enum):
    """Where an error response is allowed to go."""

    RETURN_TO_CLIENT = "return_to_client"
    SHOW_ERROR_PAGE = "show_error_page"


@dataclass(frozen=True)
class AuthorizationRequestContext:
    """Fields of the validated authorization request echoed on the result."""

    client_id: str | None = None
    redirect_uri: str | None = None
    response_mode: str | None = None
    state: str | None = None
    prompt_mode: str | None = None
    ui_locales: str | None = None
    display_mode: str | None = None


@dataclass(frozen=True)
class AuthorizationResult:
    """Outcome of processing an authorization request.

    Exactly one of ``parameters`` (success) or ``error`` (failure) is
    populated. Use :meth:`success` and :meth:`failure` to build one.
    """

    request: AuthorizationRequestContext | None = None
    redirect_uri: str | None = None
    parameters: Mapping[str, str] = field(default_factory=dict)
    error: str | None = None
    error_description: str | None = None

    def __post_init__(self) -> None:
        """Enforce the success/error invariant and freeze the parameters."""
        if self.error is not None and self.parameters:
            raise InvalidAuthorizationResultError(
                "Authorization result cannot carry both parameters and an error"
            )
        if self.error is None:
            if self.error_description is not None:
                raise InvalidAuthorizationResultError(
                    "Authorization result cannot carry both parameters and an error"
                )
            if not self.parameters:
                raise InvalidAuthorizationResultError(
                    "Successful authorization result requires response parameters"
                )
            if not self.redirect_uri:
                raise InvalidAuthorizationResultError(
                    "Successful authorization result requires a redirect URI"
                )
            if self.request is None or not self.request.client_id:
                raise InvalidAuthorizationResultError(
                    "Successful authorization result requires a client id"
                )
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    @classmethod
    def success(
        cls,
        request: AuthorizationRequestContext,
        parameters: Mapping[str, str],
        redirect_uri: str | None = None,
    ) -> AuthorizationResult:
        """Build a successful result, defaulting to the request's redirect URI."""
        return cls(
            request=request,
            redirect_uri=redirect_uri or request.redirect_uri,
            parameters=parameters,
        )

    @classmethod
    def failure(
        cls,
        error: str,
        error_description: str | None = None,
        request: AuthorizationRequestContext | None = None,
        redirect_uri: str | None = None,
    ) -> AuthorizationResult:
        """Build an error result.

        ``redirect_uri`` is only set once the client's redirect target has
        been validated upstream; without it the error can't be returned
        to the client.
        """
        return cls(
            request=request,
            redirect_uri=redirect_uri,
            error=error,
            error_description=error_description,
        )

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def client_id(self) -> str | None:
        return self.request.client_id if self.request else None

    @property
    def response_mode(self) -> str | None:
        return self.request.response_mode if self.request else None

    @property
    def prompt_mode(self) -> str | None:
        return self.request.prompt_mode if self.request else None

    def to_parameters(self) -> dict[str, str]:
        """Outgoing response parameters in wire order.

        Error results carry ``error``, ``error_description`` and ``state``;
        success results carry their own parameters minus empty values.
        """
        if self.is_error:
            params = {"error": self.error}
            if self.error_description:
                params["error_description"] = self.error_description
            if self.request and self.request.state:
                params["state"] = self.request.state
            return params

        return {
            name: value
            for name, value in self.parameters.items()
            if value is not None and value != ""
        }
