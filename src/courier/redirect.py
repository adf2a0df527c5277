"""Redirect URI construction for query and fragment response modes."""

from __future__ import annotations

import logging
from typing import Mapping
from urllib.parse import quote, urlencode, urlsplit

from courier.models.errors import UnsupportedDeliveryModeError
from courier.models.result import AuthorizationResult, DeliveryMode

logger = logging.getLogger(__name__)

# draft-bradley-oauth-open-redirector-00
OPEN_REDIRECT_SUFFIX = "#_=_"


def to_query_string(parameters: Mapping[str, str]) -> str:
    """Percent-encode parameters in insertion order (spaces as %20)."""
    return urlencode(parameters, quote_via=quote)


def add_query_string(url: str, query: str) -> str:
    """Append ``query`` to the query component, keeping any existing one.

    A fragment already present on ``url`` stays at the end.
    """
    if not query:
        return url

    url, hash_mark, fragment = url.partition("#")
    if "?" not in url:
        url += "?"
    elif not url.endswith(("?", "&")):
        url += "&"
    return f"{url}{query}{hash_mark}{fragment}"


def add_hash_fragment(url: str, fragment: str) -> str:
    if not fragment:
        return url

    if "#" not in url:
        url += "#"
    elif not url.endswith(("#", "&")):
        url += "&"
    return url + fragment


def add_query_parameter(url: str, name: str, value: str) -> str:
    return add_query_string(url, to_query_string({name: value}))


def to_absolute_url(base_url: str, url: str) -> str:
    """Resolve a local ``url`` under ``base_url``, keeping its path prefix.

    Absolute URLs are returned unchanged. A leading ``~/`` or ``/`` is
    relative to the application root, not the host root.
    """
    if urlsplit(url).scheme or url.startswith("//"):
        return url
    if url.startswith("~/"):
        url = url[1:]
    return base_url.rstrip("/") + "/" + url.lstrip("/")


class RedirectUriBuilder:
    """Serializes response parameters onto the client's redirect URI."""

    def build(self, result: AuthorizationResult, parameters: Mapping[str, str]) -> str:
        """Build the final redirect URI for ``result``.

        Args:
            result: Result carrying the base redirect URI and response mode
            parameters: Augmented outgoing parameters

        Returns:
            Absolute URI with parameters in the query or the fragment

        Raises:
            UnsupportedDeliveryModeError: If the mode is not query or fragment
        """
        mode = DeliveryMode.parse(result.response_mode)
        if mode not in (DeliveryMode.QUERY, DeliveryMode.FRAGMENT):
            raise UnsupportedDeliveryModeError(
                f"Response mode {mode.value} can't be delivered as a redirect"
            )
        if not result.redirect_uri:
            raise UnsupportedDeliveryModeError(
                "Authorization result has no redirect URI to deliver to"
            )

        query = to_query_string(parameters)
        if mode is DeliveryMode.QUERY:
            uri = add_query_string(result.redirect_uri, query)
        else:
            uri = add_hash_fragment(result.redirect_uri, query)

        if result.is_error and "#" not in uri:
            uri += OPEN_REDIRECT_SUFFIX

        logger.debug(
            f"Built {mode.value} redirect with parameters {list(parameters)}"
        )
        return uri
