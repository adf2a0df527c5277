"""Response header helpers for redirects and the form_post document."""

from __future__ import annotations

from starlette.datastructures import MutableHeaders

from courier.config import CspSettings

NO_CACHE = "no-store, no-cache, max-age=0"


def set_no_cache(headers: MutableHeaders) -> None:
    """Disable caching, overriding any Cache-Control set upstream."""
    headers["Cache-Control"] = NO_CACHE
    if "Pragma" not in headers:
        headers["Pragma"] = "no-cache"


def add_script_csp_headers(
    headers: MutableHeaders, options: CspSettings, script_hash: str
) -> None:
    """Allow only the inline script matching ``script_hash`` to run."""
    unsafe_inline = "'unsafe-inline' " if options.level == 1 else ""
    policy = f"default-src 'none'; script-src {unsafe_inline}'{script_hash}'"

    if "Content-Security-Policy" not in headers:
        headers["Content-Security-Policy"] = policy
    if options.add_deprecated_header and "X-Content-Security-Policy" not in headers:
        headers["X-Content-Security-Policy"] = policy


def add_referrer_policy(headers: MutableHeaders, policy: str = "no-referrer") -> None:
    if "Referrer-Policy" not in headers:
        headers["Referrer-Policy"] = policy
