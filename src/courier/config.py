"""Configuration for authorization response delivery.

Values come from constructor arguments, ``COURIER_`` prefixed environment
variables or a ``.env`` file, in that order of precedence. Nested CSP
options use a double underscore, e.g. ``COURIER_CSP__LEVEL=1``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CspSettings(BaseModel):
    """Content-Security-Policy options for the form_post document."""

    # Level 1 browsers don't understand hash sources and need 'unsafe-inline'
    level: int = Field(default=2, ge=1, le=2)
    add_deprecated_header: bool = True


class CourierSettings(BaseSettings):
    """Settings shared by every dispatched authorization response."""

    error_url: str = "/home/error"
    error_id_parameter: str = Field(default="errorId", min_length=1)
    csp: CspSettings = Field(default_factory=CspSettings)

    model_config = SettingsConfigDict(
        env_prefix="COURIER_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )
