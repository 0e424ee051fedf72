"""Boundary adapter between the host's per-row calling convention and providers.

Architectural role:
    Implements the two host-visible functions, `ai_prompt` and `create_embed`.
    Each call receives four nullable strings and returns a `FunctionResult`
    shaped like the host's fixed-size result slot.

Request lifecycle (per row):
    1. Any NULL argument -> NULL result; nothing else happens.
    2. Empty-argument validation in fixed order, each with its own message.
    3. Provider resolution through the registry.
    4. One provider call (one HTTP request at most).
    5. Output bounding: values are cut to `max_str_len - 1` bytes (room for the
       NUL terminator) and errors to `max_error_len` bytes.

Error handling strategy:
    Every failure becomes an ERROR result carrying a message. Unexpected
    exceptions from provider code are logged with traceback and reported as
    `Internal error: <type>` so a single row never aborts the host.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from vsql_ai.config import MAX_ERROR_MESSAGE_LENGTH, MAX_OUTPUT_BUFFER_SIZE
from vsql_ai.llm.base import ErrorKind, ProviderResult
from vsql_ai.llm.registry import ProviderRegistry, UnknownProviderError, build_default_registry

logger = logging.getLogger(__name__)


class ResultType(Enum):
    VALUE = "value"
    NULL = "null"
    ERROR = "error"


class Operation(Enum):
    GENERATE = "generate"
    EMBED = "embed"


# Labels used in "<field> cannot be empty", in argument order.
PROMPT_FIELDS = ("Provider name", "Model name", "API key", "Prompt text")
EMBED_FIELDS = ("Provider name", "Model name", "API key", "Text")


@dataclass(frozen=True)
class FunctionResult:
    """Host result slot.

    `value` holds the UTF-8 payload without the terminator and `actual_len` its
    length in bytes. `error_msg` is set only for ERROR results.
    """

    type: ResultType
    value: bytes | None = None
    actual_len: int = 0
    error_msg: str | None = None

    @classmethod
    def null(cls) -> "FunctionResult":
        return cls(type=ResultType.NULL)

    @classmethod
    def error(cls, message: str, max_error_len: int = MAX_ERROR_MESSAGE_LENGTH) -> "FunctionResult":
        return cls(type=ResultType.ERROR, error_msg=truncate_text(message, max_error_len))

    @classmethod
    def from_value(cls, value: str, max_str_len: int = MAX_OUTPUT_BUFFER_SIZE) -> "FunctionResult":
        encoded = value.encode("utf-8")
        limit = max_str_len - 1
        if len(encoded) > limit:
            logger.info("Truncating %d-byte result to %d bytes", len(encoded), limit)
            encoded = encoded[:limit]
        return cls(type=ResultType.VALUE, value=encoded, actual_len=len(encoded))

    @property
    def buffer(self) -> bytes | None:
        """The value as the host sees it, NUL-terminated."""
        if self.value is None:
            return None
        return self.value + b"\0"

    @property
    def text(self) -> str | None:
        if self.value is None:
            return None
        # A byte-level cut may split a multi-byte character at the end.
        return self.value.decode("utf-8", errors="ignore")


def truncate_text(text: str, limit: int) -> str:
    """Cut `text` to at most `limit` UTF-8 bytes without splitting a character."""
    encoded = text.encode("utf-8")
    if len(encoded) <= limit:
        return text
    return encoded[:limit].decode("utf-8", errors="ignore")


def ai_prompt(
    provider: str | None,
    model: str | None,
    api_key: str | None,
    prompt: str | None,
    *,
    registry: ProviderRegistry | None = None,
    max_str_len: int = MAX_OUTPUT_BUFFER_SIZE,
    max_error_len: int = MAX_ERROR_MESSAGE_LENGTH,
) -> FunctionResult:
    """Send `prompt` to `provider`/`model` and return the generated text."""
    return invoke(
        Operation.GENERATE,
        (provider, model, api_key, prompt),
        PROMPT_FIELDS,
        registry=registry,
        max_str_len=max_str_len,
        max_error_len=max_error_len,
    )


def create_embed(
    provider: str | None,
    model: str | None,
    api_key: str | None,
    text: str | None,
    *,
    registry: ProviderRegistry | None = None,
    max_str_len: int = MAX_OUTPUT_BUFFER_SIZE,
    max_error_len: int = MAX_ERROR_MESSAGE_LENGTH,
) -> FunctionResult:
    """Embed `text` with `provider`/`model`; the value is a JSON array of floats."""
    return invoke(
        Operation.EMBED,
        (provider, model, api_key, text),
        EMBED_FIELDS,
        registry=registry,
        max_str_len=max_str_len,
        max_error_len=max_error_len,
    )


def invoke(
    operation: Operation,
    args: tuple,
    labels: tuple,
    *,
    registry: ProviderRegistry | None = None,
    max_str_len: int = MAX_OUTPUT_BUFFER_SIZE,
    max_error_len: int = MAX_ERROR_MESSAGE_LENGTH,
) -> FunctionResult:
    """Run one host invocation end to end.

    Raises:
        ValueError: When the host-supplied buffer sizes are unusable.
    """
    if max_str_len < 1:
        raise ValueError(f"max_str_len must be at least 1, got {max_str_len}")
    if max_error_len < 1:
        raise ValueError(f"max_error_len must be at least 1, got {max_error_len}")

    if any(arg is None for arg in args):
        return FunctionResult.null()

    for label, arg in zip(labels, args):
        if not arg:
            return FunctionResult.error(f"{label} cannot be empty", max_error_len)

    provider_name, model, api_key, text = args
    active_registry = registry if registry is not None else build_default_registry()

    try:
        provider = active_registry.resolve(provider_name)
    except UnknownProviderError as exc:
        return FunctionResult.error(str(exc), max_error_len)

    result = _call_provider(provider, operation, model, api_key, text)
    if result.error is not None:
        logger.info(
            "%s via %s failed (%s): %s",
            operation.value,
            provider_name,
            result.error_kind.value,
            truncate_text(result.error, max_error_len),
        )
        return FunctionResult.error(result.error, max_error_len)

    return FunctionResult.from_value(result.value, max_str_len)


def _call_provider(provider, operation: Operation, model: str, api_key: str, text: str) -> ProviderResult:
    try:
        if operation is Operation.EMBED:
            return provider.embed(model, api_key, text)
        return provider.generate(model, api_key, text)
    except Exception as exc:
        logger.exception("Provider %s raised during %s", getattr(provider, "name", provider), operation.value)
        return ProviderResult.fail(f"Internal error: {type(exc).__name__}", ErrorKind.INTERNAL)
