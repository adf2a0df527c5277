"""Tests for authorization result models.

Covers the success/error invariant, outgoing parameter ordering and
response mode parsing.
"""

import pytest

from courier.models.errors import (
    InvalidAuthorizationResultError,
    UnsupportedDeliveryModeError,
)
from courier.models.result import (
    AuthorizationRequestContext,
    AuthorizationResult,
    DeliveryMode,
)
from tests.conftest import make_error, make_request, make_success


class TestAuthorizationResultInvariant:
    def test_success_defaults_to_request_redirect_uri(self):
        # Act
        result = make_success()

        # Assert
        assert not result.is_error
        assert result.redirect_uri == "https://client.example/cb"
        assert result.client_id == "web-client"

    def test_error_with_parameters_is_rejected(self):
        # Act & Assert
        with pytest.raises(InvalidAuthorizationResultError):
            AuthorizationResult(
                request=make_request(),
                redirect_uri="https://client.example/cb",
                parameters={"code": "abc"},
                error="invalid_request",
            )

    def test_success_with_error_description_is_rejected(self):
        # Act & Assert
        with pytest.raises(InvalidAuthorizationResultError) as exc_info:
            AuthorizationResult(
                request=make_request(),
                redirect_uri="https://client.example/cb",
                parameters={"code": "abc"},
                error_description="boom",
            )
        assert "cannot carry both" in str(exc_info.value)
        assert isinstance(exc_info.value, ValueError)

    def test_success_without_parameters_is_rejected(self):
        with pytest.raises(InvalidAuthorizationResultError):
            AuthorizationResult.success(make_request(), {})

    def test_success_without_redirect_uri_is_rejected(self):
        with pytest.raises(InvalidAuthorizationResultError):
            AuthorizationResult.success(
                make_request(redirect_uri=None), {"code": "abc"}
            )

    def test_success_without_client_id_is_rejected(self):
        with pytest.raises(InvalidAuthorizationResultError):
            AuthorizationResult.success(make_request(client_id=None), {"code": "abc"})

    def test_invalid_result_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            AuthorizationResult()

    def test_parameters_are_read_only(self):
        # Arrange
        source = {"code": "abc"}
        result = AuthorizationResult.success(make_request(), source)

        # Act
        source["code"] = "changed"

        # Assert
        assert result.parameters["code"] == "abc"
        with pytest.raises(TypeError):
            result.parameters["code"] = "tampered"

    def test_error_without_request_is_allowed(self):
        # Act
        result = AuthorizationResult.failure("invalid_request")

        # Assert
        assert result.is_error
        assert result.client_id is None
        assert result.response_mode is None
        assert result.prompt_mode is None


class TestToParameters:
    def test_error_parameters_in_wire_order(self):
        # Arrange
        result = make_error("login_required", "Login needed", state="s-1")

        # Act
        params = result.to_parameters()

        # Assert
        assert list(params.items()) == [
            ("error", "login_required"),
            ("error_description", "Login needed"),
            ("state", "s-1"),
        ]

    def test_error_parameters_skip_missing_description_and_state(self):
        # Act
        params = make_error("access_denied").to_parameters()

        # Assert
        assert params == {"error": "access_denied"}

    def test_success_parameters_keep_order_and_drop_empty_values(self):
        # Arrange
        result = make_success(
            {"code": "abc", "id_token": "", "session_state": None, "state": "xyz"}
        )

        # Act
        params = result.to_parameters()

        # Assert
        assert list(params) == ["code", "state"]

    def test_to_parameters_returns_a_fresh_copy(self):
        # Arrange
        result = make_success()

        # Act
        params = result.to_parameters()
        params["extra"] = "1"

        # Assert
        assert "extra" not in result.to_parameters()


class TestDeliveryModeParse:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("query", DeliveryMode.QUERY),
            ("fragment", DeliveryMode.FRAGMENT),
            ("form_post", DeliveryMode.FORM_POST),
            (DeliveryMode.FRAGMENT, DeliveryMode.FRAGMENT),
        ],
    )
    def test_known_modes(self, value, expected):
        assert DeliveryMode.parse(value) is expected

    @pytest.mark.parametrize("value", ["web_message", "", None, "QUERY"])
    def test_unknown_modes_raise(self, value):
        with pytest.raises(UnsupportedDeliveryModeError):
            DeliveryMode.parse(value)


def test_request_context_defaults():
    context = AuthorizationRequestContext()

    assert context.client_id is None
    assert context.prompt_mode is None
