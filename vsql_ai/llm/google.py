"""Google Generative Language (Gemini) provider.

Wire format:
    - generate: POST `<base>/<version>/models/<model>:generateContent` with body
      `{contents: [{parts: [{text}]}]}`; text at
      `candidates[0].content.parts[0].text`.
    - embed: POST `<base>/<version>/models/<model>:embedContent` with body
      `{content: {parts: [{text}]}}`; vector at `embedding.values`.

The credential travels in the `x-goog-api-key` header, never in the query
string, so it cannot leak into URLs that end up in logs.
"""

import logging
import math
from numbers import Real
from typing import Any

from vsql_ai.config import Settings
from vsql_ai.llm.base import (
    ProviderResult,
    Transport,
    dump_json,
    first,
    non_empty_text,
    resolve_response,
    send,
)
from vsql_ai.transport.http_client import post

logger = logging.getLogger(__name__)


class GoogleProvider:
    """Stateless Gemini adapter; one instance per request."""

    name = "google"
    display_name = "Google"

    def __init__(self, settings: Settings | None = None, transport: Transport = post) -> None:
        self.settings = settings or Settings()
        self.transport = transport

    def build_headers(self, credential: str) -> dict[str, str]:
        return {
            "x-goog-api-key": credential,
            "content-type": "application/json",
        }

    def model_path(self, model: str, method: str) -> str:
        return f"/{self.settings.google_api_version}/models/{model}:{method}"

    def generate(self, model: str, credential: str, text: str) -> ProviderResult:
        logger.debug("Google generate model=%s chars=%d", model, len(text))
        response = send(
            self.transport,
            self.settings,
            self.settings.google_base_url,
            self.model_path(model, "generateContent"),
            {"contents": [{"parts": [{"text": text}]}]},
            self.build_headers(credential),
        )
        return resolve_response(
            response,
            extract_text,
            "candidates or content",
            label=f"google generate ({model})",
        )

    def embed(self, model: str, credential: str, text: str) -> ProviderResult:
        logger.debug("Google embed model=%s chars=%d", model, len(text))
        response = send(
            self.transport,
            self.settings,
            self.settings.google_base_url,
            self.model_path(model, "embedContent"),
            {"content": {"parts": [{"text": text}]}},
            self.build_headers(credential),
        )
        return resolve_response(
            response,
            extract_embedding,
            "embedding.values",
            label=f"google embed ({model})",
        )


def extract_text(payload: dict[str, Any]) -> str | None:
    """Return `candidates[0].content.parts[0].text` when present."""
    candidate = first(payload.get("candidates"))
    if not isinstance(candidate, dict):
        return None
    content = candidate.get("content")
    if not isinstance(content, dict):
        return None
    part = first(content.get("parts"))
    if not isinstance(part, dict):
        return None
    return non_empty_text(part.get("text"))


def extract_embedding(payload: dict[str, Any]) -> str | None:
    """Return `embedding.values` re-serialized as a JSON array of floats."""
    embedding = payload.get("embedding")
    if not isinstance(embedding, dict):
        return None
    values = embedding.get("values")
    if not isinstance(values, list):
        return None
    if any(isinstance(item, bool) or not isinstance(item, Real) for item in values):
        return None
    try:
        vector = [float(item) for item in values]
    except OverflowError:
        return None
    # JSON has no NaN or Infinity.
    if not all(math.isfinite(item) for item in vector):
        return None
    return dump_json(vector)
