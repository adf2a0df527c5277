"""Decides whether an authorization error may be returned to the client.

OpenID Connect Core 1.0 Section 3.1.2.6: when the client asked for a
silent authentication (``prompt=none``) it expects a machine readable
error instead of a page it will never render.
"""

from __future__ import annotations

from courier.models.result import AuthorizationResult, ErrorDisposition

ACCESS_DENIED = "access_denied"
PROMPT_NONE = "none"

INTERACTION_REQUIRED_ERRORS = frozenset(
    {
        "account_selection_required",
        "login_required",
        "consent_required",
        "interaction_required",
    }
)


class ErrorClassifier:
    """Pure classification of error results."""

    def classify(self, result: AuthorizationResult) -> ErrorDisposition:
        if result.error == ACCESS_DENIED:
            return ErrorDisposition.RETURN_TO_CLIENT

        if (
            result.error in INTERACTION_REQUIRED_ERRORS
            and result.prompt_mode == PROMPT_NONE
        ):
            return ErrorDisposition.RETURN_TO_CLIENT

        return ErrorDisposition.SHOW_ERROR_PAGE
