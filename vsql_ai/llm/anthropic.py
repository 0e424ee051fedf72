"""Anthropic Messages API provider.

Wire format:
    POST `<base>/v1/messages` with `x-api-key` and `anthropic-version` headers and
    body `{model, max_tokens, messages: [{role: "user", content}]}`. The reply
    text is read from `content[0].text`.

Embeddings:
    The Messages API has no embedding endpoint; `embed` reports the operation as
    unsupported without touching the network.
"""

import logging
from typing import Any

from vsql_ai.config import Settings
from vsql_ai.llm.base import (
    ProviderResult,
    Transport,
    first,
    non_empty_text,
    resolve_response,
    send,
    unsupported,
)
from vsql_ai.transport.http_client import post

logger = logging.getLogger(__name__)

MESSAGES_PATH = "/v1/messages"


class AnthropicProvider:
    """Stateless Anthropic adapter; one instance per request."""

    name = "anthropic"
    display_name = "Anthropic"

    def __init__(self, settings: Settings | None = None, transport: Transport = post) -> None:
        self.settings = settings or Settings()
        self.transport = transport

    def build_headers(self, credential: str) -> dict[str, str]:
        return {
            "x-api-key": credential,
            "anthropic-version": self.settings.anthropic_version,
            "content-type": "application/json",
        }

    def build_request_body(self, model: str, text: str) -> dict[str, Any]:
        return {
            "model": model,
            "max_tokens": self.settings.anthropic_max_tokens,
            "messages": [{"role": "user", "content": text}],
        }

    def generate(self, model: str, credential: str, text: str) -> ProviderResult:
        logger.debug("Anthropic generate model=%s chars=%d", model, len(text))
        response = send(
            self.transport,
            self.settings,
            self.settings.anthropic_base_url,
            MESSAGES_PATH,
            self.build_request_body(model, text),
            self.build_headers(credential),
        )
        return resolve_response(
            response,
            extract_text,
            "content",
            label=f"anthropic generate ({model})",
        )

    def embed(self, model: str, credential: str, text: str) -> ProviderResult:
        del model, credential, text
        return unsupported(self.display_name, "Embeddings")


def extract_text(payload: dict[str, Any]) -> str | None:
    """Return `content[0].text` when present."""
    block = first(payload.get("content"))
    if not isinstance(block, dict):
        return None
    return non_empty_text(block.get("text"))
