"""Provider contract and shared response-resolution rules.

Architectural role:
    Defines the capability interface every vendor implements (`generate`,
    `embed`), the single-outcome `ProviderResult` type, and the parsing and
    error-precedence rules that all vendors share.

Resolution order for one HTTP exchange:
    1. Transport failure (no response) -> transport message, body untouched.
    2. Non-2xx status -> structured `error.message` from the body when present,
       else `HTTP <status> - <first 100 characters of body>`.
    3. 2xx status -> JSON parse, then top-level `error` object, then the
       vendor-specific success path.

Determinism:
    Parsing is deterministic for a fixed response body.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from vsql_ai.config import HTTP_ERROR_BODY_PREVIEW, Settings
from vsql_ai.transport.http_client import TransportResponse

logger = logging.getLogger(__name__)

Transport = Callable[..., TransportResponse]
Extractor = Callable[[dict[str, Any]], str | None]


class ErrorKind(Enum):
    """Classification attached to every failed `ProviderResult`."""

    VALIDATION = "validation"
    TRANSPORT = "transport"
    API = "api"
    PARSE = "parse"
    UNSUPPORTED = "unsupported"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ProviderResult:
    """Exactly one of a success payload or a classified error.

    For `embed`, `value` is the embedding serialized as a compact JSON array.
    """

    value: str | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None

    def __post_init__(self) -> None:
        if (self.value is None) == (self.error is None):
            raise ValueError("ProviderResult requires exactly one of value or error")
        if self.error is not None:
            if not self.error:
                raise ValueError("ProviderResult error message cannot be empty")
            if self.error_kind is None:
                raise ValueError("ProviderResult error requires an error kind")
        elif self.error_kind is not None:
            raise ValueError("ProviderResult value cannot carry an error kind")

    @classmethod
    def ok(cls, value: str) -> "ProviderResult":
        return cls(value=value)

    @classmethod
    def fail(cls, message: str, kind: ErrorKind) -> "ProviderResult":
        return cls(error=message, error_kind=kind)

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def vector(self) -> list[float]:
        """Deserialize an embedding payload."""
        if self.value is None:
            raise ValueError(f"No embedding available: {self.error}")
        return [float(item) for item in json.loads(self.value)]


class Provider(Protocol):
    """Capability set implemented once per vendor."""

    name: str

    def generate(self, model: str, credential: str, text: str) -> ProviderResult:
        """Return generated text for `text`."""
        ...

    def embed(self, model: str, credential: str, text: str) -> ProviderResult:
        """Return the embedding of `text` as a JSON array of floats."""
        ...


# =========================================================
# JSON helpers
# =========================================================

def dump_json(value: Any) -> str:
    """Serialize compactly, matching the wire form of vendor payloads."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def first(items: Any) -> Any:
    """Return the first element of a non-empty list, else `None`."""
    if isinstance(items, list) and items:
        return items[0]
    return None


def non_empty_text(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _structured_error(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if error is None:
        return None

    if isinstance(error, dict) and error.get("message") is not None:
        message = error["message"]
        text = message if isinstance(message, str) else dump_json(message)
        if text:
            return text
    return dump_json(error)


def extract_api_error(body: bytes) -> str | None:
    """Return the structured API error message in `body`, if there is one."""
    try:
        payload = json.loads(body)
    except (ValueError, RecursionError):
        return None
    return _structured_error(payload)


def parse_payload(body: bytes, extract: Extractor, missing: str) -> ProviderResult:
    """Apply the parse -> error object -> success path rules to a 2xx body."""
    try:
        payload = json.loads(body)
    except (ValueError, RecursionError) as exc:
        return ProviderResult.fail(f"JSON parse error: {exc}", ErrorKind.PARSE)

    api_error = _structured_error(payload)
    if api_error is not None:
        return ProviderResult.fail(api_error, ErrorKind.API)

    value = extract(payload) if isinstance(payload, dict) else None
    if value is None:
        return ProviderResult.fail(f"Invalid response format: missing {missing}", ErrorKind.PARSE)
    return ProviderResult.ok(value)


def resolve_response(
    response: TransportResponse,
    extract: Extractor,
    missing: str,
    *,
    label: str = "provider",
) -> ProviderResult:
    """Turn one transport outcome into a `ProviderResult`.

    Args:
        response: Raw transport outcome.
        extract: Vendor success-path extractor; returns `None` when absent.
        missing: Field description used in `Invalid response format` errors.
        label: Provider/operation label for log lines.
    """
    if response.transport_error:
        return ProviderResult.fail(response.transport_error, ErrorKind.TRANSPORT)

    if not response.is_success:
        logger.info("%s returned HTTP %s", label, response.status_code)
        message = extract_api_error(response.body)
        if message is None:
            preview = response.text[:HTTP_ERROR_BODY_PREVIEW]
            message = f"HTTP {response.status_code} - {preview}"
        return ProviderResult.fail(message, ErrorKind.API)

    return parse_payload(response.body, extract, missing)


def send(
    transport: Transport,
    settings: Settings,
    base_url: str,
    path: str,
    body: dict[str, Any],
    headers: dict[str, str],
) -> TransportResponse:
    """Issue one POST through `transport` using the configured limits."""
    return transport(
        base_url,
        path,
        body,
        headers,
        settings.timeout_seconds,
        verify=settings.verify,
        max_redirects=settings.max_redirects,
    )


def unsupported(display_name: str, operation: str) -> ProviderResult:
    return ProviderResult.fail(
        f"{operation} not supported for {display_name} provider",
        ErrorKind.UNSUPPORTED,
    )
