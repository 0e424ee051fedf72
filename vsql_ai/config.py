"""Runtime configuration for provider calls and the host boundary.

Architectural role:
    Centralizes the fixed knobs consumed by `vsql_ai.transport`, the provider
    implementations in `vsql_ai.llm`, and the boundary adapter in
    `vsql_ai.api.functions`.

Resolution model:
    Module constants hold the defaults. `load_settings()` loads an optional
    `.env` file and lets environment variables override individual values,
    producing an immutable `Settings` object that is passed explicitly to the
    registry and extension builders.

Failure behavior:
    Malformed numeric overrides raise `ValueError` naming the variable.
    Credentials are never part of configuration.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Per-call HTTP timeout (connect, read and write phases).
REQUEST_TIMEOUT_SECONDS = 30

# Host result buffer, including the terminating NUL byte.
MAX_OUTPUT_BUFFER_SIZE = 65535

# Upper bound on an error message handed back to the host.
MAX_ERROR_MESSAGE_LENGTH = 255

# Characters of a raw HTTP error body quoted in synthesized messages.
HTTP_ERROR_BODY_PREVIEW = 100

MAX_REDIRECTS = 5

# Base URLs are `scheme://host[:port]` plus an optional path prefix.
ANTHROPIC_BASE_URL = "https://api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"
ANTHROPIC_MAX_TOKENS = 1024

GOOGLE_BASE_URL = "https://generativelanguage.googleapis.com"
GOOGLE_API_VERSION = "v1beta"

LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    """Immutable snapshot of every configurable value."""

    timeout_seconds: int = REQUEST_TIMEOUT_SECONDS
    buffer_size: int = MAX_OUTPUT_BUFFER_SIZE
    max_error_length: int = MAX_ERROR_MESSAGE_LENGTH
    max_redirects: int = MAX_REDIRECTS
    ca_bundle: str | None = None

    anthropic_base_url: str = ANTHROPIC_BASE_URL
    anthropic_version: str = ANTHROPIC_VERSION
    anthropic_max_tokens: int = ANTHROPIC_MAX_TOKENS

    google_base_url: str = GOOGLE_BASE_URL
    google_api_version: str = GOOGLE_API_VERSION

    log_level: str = LOG_LEVEL

    @property
    def verify(self):
        """Value for the `verify` argument of the transport."""
        return self.ca_bundle if self.ca_bundle else True


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _text(name: str, default: str) -> str:
    value = os.getenv(name, "").strip()
    return value or default


def load_settings() -> Settings:
    """Build settings from defaults, `.env` and the process environment.

    Returns:
        A frozen `Settings` instance.

    Raises:
        ValueError: When a numeric override is not a positive integer.
    """
    load_dotenv()

    return Settings(
        timeout_seconds=_positive_int("VSQL_AI_TIMEOUT_SECONDS", REQUEST_TIMEOUT_SECONDS),
        buffer_size=_positive_int("VSQL_AI_BUFFER_SIZE", MAX_OUTPUT_BUFFER_SIZE),
        max_error_length=_positive_int("VSQL_AI_MAX_ERROR_LENGTH", MAX_ERROR_MESSAGE_LENGTH),
        max_redirects=_positive_int("VSQL_AI_MAX_REDIRECTS", MAX_REDIRECTS),
        ca_bundle=os.getenv("VSQL_AI_CA_BUNDLE", "").strip() or None,
        anthropic_base_url=_text("ANTHROPIC_BASE_URL", ANTHROPIC_BASE_URL),
        anthropic_version=_text("ANTHROPIC_VERSION", ANTHROPIC_VERSION),
        anthropic_max_tokens=_positive_int("ANTHROPIC_MAX_TOKENS", ANTHROPIC_MAX_TOKENS),
        google_base_url=_text("GOOGLE_BASE_URL", GOOGLE_BASE_URL),
        google_api_version=_text("GOOGLE_API_VERSION", GOOGLE_API_VERSION),
        log_level=_text("VSQL_AI_LOG_LEVEL", LOG_LEVEL).upper(),
    )
