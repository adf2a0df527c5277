"""Delivery of a computed authorization result back to the client.

Decides between returning the result to the client (query, fragment or
form_post) and sending the end user to the error page, then produces
exactly one HTTP response.
"""

from __future__ import annotations

import logging
import uuid
from typing import Iterable, Mapping

from starlette.responses import HTMLResponse, RedirectResponse, Response

from courier.augmentation import QueryAugmentationPipeline, QueryAugmenter
from courier.classifier import ErrorClassifier
from courier.config import CourierSettings
from courier.form_post import SUBMIT_SCRIPT_HASH, FormPostRenderer
from courier.headers import add_referrer_policy, add_script_csp_headers, set_no_cache
from courier.models.error_context import ErrorContextRecord
from courier.models.errors import (
    SessionNotificationError,
    UnsupportedDeliveryModeError,
)
from courier.models.result import AuthorizationResult, DeliveryMode, ErrorDisposition
from courier.redirect import (
    RedirectUriBuilder,
    add_query_parameter,
    to_absolute_url,
)
from courier.session import Clock, UserSession
from courier.stores import ErrorContextStore, ErrorContextStoreAdapter

logger = logging.getLogger(__name__)


class ResponseDispatcher:
    """Turns an AuthorizationResult into a redirect, a form or an error page.

    All collaborators are bound at construction. Augmenters run in the
    order given here for every dispatched response.
    """

    def __init__(
        self,
        settings: CourierSettings,
        user_session: UserSession,
        error_store: ErrorContextStore,
        clock: Clock,
        augmenters: Iterable[QueryAugmenter] = (),
    ):
        self.settings = settings
        self._user_session = user_session
        self._error_store = ErrorContextStoreAdapter(error_store, clock)
        self._pipeline = QueryAugmentationPipeline(augmenters)
        self._classifier = ErrorClassifier()
        self._redirect_builder = RedirectUriBuilder()
        self._form_post = FormPostRenderer()

    async def dispatch(
        self,
        result: AuthorizationResult,
        request_id: str | None = None,
        headers: Mapping[str, str] | None = None,
        base_url: str | None = None,
    ) -> Response:
        """Produce the HTTP response delivering ``result``.

        Args:
            result: Completed authorization result
            request_id: Trace id of the current request, stored with errors
            headers: Headers already set on the response by outer layers
            base_url: Base URL of the application, including any mount path.
                A relative error URL is resolved against it.

        Returns:
            Redirect to the client, form_post document, or redirect to the
            error page

        Raises:
            UnsupportedDeliveryModeError: If the response mode is unusable
            AugmentationError: If a query augmenter fails
            SessionNotificationError: If the session rejects the client
            StoreUnavailableError: If the error context can't be persisted
        """
        if not result.is_error:
            return await self._process_response(result, headers)

        disposition = self._classifier.classify(result)
        if disposition is ErrorDisposition.RETURN_TO_CLIENT:
            logger.info(f"Returning error {result.error} to client {result.client_id}")
            return await self._render_response(result, headers)

        return await self._redirect_to_error_page(result, request_id, base_url)

    async def _process_response(
        self, result: AuthorizationResult, headers: Mapping[str, str] | None
    ) -> Response:
        # Must happen before rendering so a failure still aborts delivery
        try:
            await self._user_session.add_client_id(result.client_id)
        except Exception as e:
            raise SessionNotificationError(
                f"Failed to record authorized client {result.client_id}: {e}"
            ) from e

        return await self._render_response(result, headers)

    async def _render_response(
        self, result: AuthorizationResult, headers: Mapping[str, str] | None
    ) -> Response:
        try:
            mode = DeliveryMode.parse(result.response_mode)
        except UnsupportedDeliveryModeError:
            logger.error(
                f"Unsupported response mode {result.response_mode!r} "
                f"for client {result.client_id}"
            )
            raise
        if not result.redirect_uri:
            logger.error(f"No redirect URI to deliver {mode.value} response to")
            raise UnsupportedDeliveryModeError(
                f"Authorization result has no redirect URI for {mode.value} delivery"
            )
        parameters = await self._pipeline.augment(result, result.to_parameters())

        if mode is DeliveryMode.FORM_POST:
            response = HTMLResponse(
                self._form_post.render(result, parameters), headers=headers
            )
            set_no_cache(response.headers)
            add_script_csp_headers(
                response.headers, self.settings.csp, SUBMIT_SCRIPT_HASH
            )
            add_referrer_policy(response.headers)
            logger.info(f"Rendered form_post response for {result.client_id}")
            return response

        uri = self._redirect_builder.build(result, parameters)
        response = RedirectResponse(uri, status_code=302, headers=headers)
        set_no_cache(response.headers)
        logger.info(f"Redirecting {mode.value} response to {result.client_id}")
        return response

    async def _redirect_to_error_page(
        self,
        result: AuthorizationResult,
        request_id: str | None,
        base_url: str | None,
    ) -> Response:
        request = result.request
        record_fields = {
            "request_id": request_id or str(uuid.uuid4()),
            "error": result.error,
            "error_description": result.error_description,
            "ui_locales": request.ui_locales if request else None,
            "display_mode": request.display_mode if request else None,
            "client_id": result.client_id,
        }
        if result.redirect_uri and result.response_mode:
            record_fields.update(await self._error_redirect_fields(result))

        record = ErrorContextRecord(**record_fields)
        message_id = await self._error_store.write(record)

        logger.warning(
            f"Showing error page for {result.error} "
            f"(client {result.client_id}, request {record.request_id})"
        )
        error_url = self.settings.error_url
        if base_url:
            error_url = to_absolute_url(base_url, error_url)
        url = add_query_parameter(
            error_url, self.settings.error_id_parameter, message_id
        )
        response = RedirectResponse(url, status_code=302)
        set_no_cache(response.headers)
        return response

    async def _error_redirect_fields(self, result: AuthorizationResult) -> dict:
        """Redirect details kept so the error page can still reach the client."""
        try:
            mode = DeliveryMode.parse(result.response_mode)
        except UnsupportedDeliveryModeError:
            logger.debug(
                f"Not recording redirect for unsupported mode {result.response_mode!r}"
            )
            return {}

        parameters = await self._pipeline.augment(result, result.to_parameters())
        if mode is DeliveryMode.FORM_POST:
            return {
                "redirect_uri": result.redirect_uri,
                "response_mode": mode.value,
                "parameters": dict(parameters),
            }
        return {
            "redirect_uri": self._redirect_builder.build(result, parameters),
            "response_mode": mode.value,
        }
