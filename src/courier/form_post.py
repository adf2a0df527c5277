"""Self-submitting HTML form for the form_post response mode.

The document references no external resources. Its only script is the
fixed auto-submit snippet below, whose hash is pinned in the
Content-Security-Policy sent alongside it.
"""

from __future__ import annotations

import base64
import hashlib
import html
from typing import Mapping

from courier.models.result import AuthorizationResult

SUBMIT_SCRIPT = "(function(){document.forms[0].submit();})();"


def script_hash(script: str) -> str:
    """CSP source expression for an inline script: ``sha256-<base64>``."""
    digest = hashlib.sha256(script.encode("utf-8")).digest()
    return "sha256-" + base64.b64encode(digest).decode("ascii")


SUBMIT_SCRIPT_HASH = script_hash(SUBMIT_SCRIPT)

FORM_POST_HTML = (
    "<html><head><base target='_self'/></head><body>"
    "<form method='post' action='{action}'>{fields}"
    "<noscript><button>Click to continue</button></noscript>"
    "</form><script>{script}</script></body></html>"
)


def hidden_field(name: str, value: str) -> str:
    return (
        f"<input type='hidden' name='{html.escape(name, quote=True)}' "
        f"value='{html.escape(value, quote=True)}' />\n"
    )


class FormPostRenderer:
    """Renders response parameters as hidden fields posted to the client."""

    def render(self, result: AuthorizationResult, parameters: Mapping[str, str]) -> str:
        fields = "".join(
            hidden_field(name, str(value)) for name, value in parameters.items()
        )
        return FORM_POST_HTML.format(
            action=html.escape(result.redirect_uri or "", quote=True),
            fields=fields,
            script=SUBMIT_SCRIPT,
        )
