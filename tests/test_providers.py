"""Tests for the Anthropic and Google providers against a stub transport."""

import json

import pytest

from conftest import ANTHROPIC_OK, GEMINI_OK, StubTransport, json_response, raw_response
from vsql_ai.config import Settings
from vsql_ai.llm import base
from vsql_ai.llm.anthropic import AnthropicProvider
from vsql_ai.llm.base import ErrorKind
from vsql_ai.llm.google import GoogleProvider
from vsql_ai.transport.http_client import TransportError, TransportResponse


def anthropic(response: TransportResponse) -> tuple[AnthropicProvider, StubTransport]:
    transport = StubTransport(response)
    return AnthropicProvider(transport=transport), transport


def google(response: TransportResponse) -> tuple[GoogleProvider, StubTransport]:
    transport = StubTransport(response)
    return GoogleProvider(transport=transport), transport


# =========================================================
# Anthropic
# =========================================================

def test_anthropic_generate_returns_first_content_text() -> None:
    provider, transport = anthropic(json_response(200, ANTHROPIC_OK))

    result = provider.generate("claude-3-5-haiku-latest", "sk-ant-key", "Say hello")

    assert result.value == "Hello from Claude"
    assert result.error is None

    call = transport.calls[0]
    assert call["base_url"] == "https://api.anthropic.com"
    assert call["path"] == "/v1/messages"
    assert call["timeout"] == 30
    assert call["headers"] == {
        "x-api-key": "sk-ant-key",
        "anthropic-version": "2023-06-01",
        "content-type": "application/json",
    }
    assert call["body"] == {
        "model": "claude-3-5-haiku-latest",
        "max_tokens": 1024,
        "messages": [{"role": "user", "content": "Say hello"}],
    }


def test_anthropic_uses_configured_endpoint_and_limits() -> None:
    transport = StubTransport(json_response(200, ANTHROPIC_OK))
    settings = Settings(
        anthropic_base_url="http://localhost:9000",
        anthropic_max_tokens=64,
        timeout_seconds=5,
        ca_bundle="/etc/ssl/custom.pem",
    )
    provider = AnthropicProvider(settings, transport)

    provider.generate("m", "k", "hi")

    call = transport.calls[0]
    assert call["base_url"] == "http://localhost:9000"
    assert call["body"]["max_tokens"] == 64
    assert call["timeout"] == 5
    assert call["verify"] == "/etc/ssl/custom.pem"


def test_structured_error_wins_over_status() -> None:
    provider, _ = anthropic(json_response(429, {"error": {"message": "rate limited"}}))

    result = provider.generate("m", "k", "hi")

    assert result.error == "rate limited"
    assert result.error_kind is ErrorKind.API
    assert result.value is None


def test_non_json_error_body_falls_back_to_status_and_body() -> None:
    provider, _ = anthropic(raw_response(500, "oops"))

    result = provider.generate("m", "k", "hi")

    assert result.error == "HTTP 500 - oops"
    assert result.error_kind is ErrorKind.API


def test_raw_error_body_is_cut_at_100_characters() -> None:
    provider, _ = anthropic(raw_response(502, "x" * 250))

    result = provider.generate("m", "k", "hi")

    assert result.error == "HTTP 502 - " + "x" * 100


def test_json_error_body_without_error_object_uses_raw_fallback() -> None:
    provider, _ = anthropic(raw_response(503, '{"detail":"maintenance"}'))

    result = provider.generate("m", "k", "hi")

    assert result.error == 'HTTP 503 - {"detail":"maintenance"}'


def test_error_object_without_message_is_serialized() -> None:
    provider, _ = anthropic(json_response(400, {"error": {"type": "invalid_request_error"}}))

    result = provider.generate("m", "k", "hi")

    assert result.error == '{"type":"invalid_request_error"}'


def test_error_object_in_success_response_overrides_content() -> None:
    payload = {"error": {"message": "overloaded"}, "content": [{"text": "ignored"}]}
    provider, _ = anthropic(json_response(200, payload))

    result = provider.generate("m", "k", "hi")

    assert result.error == "overloaded"
    assert result.value is None


def test_success_status_with_invalid_json_is_parse_error() -> None:
    provider, _ = anthropic(raw_response(200, "<html>not json</html>"))

    result = provider.generate("m", "k", "hi")

    assert result.error.startswith("JSON parse error: ")
    assert result.error_kind is ErrorKind.PARSE


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"content": []},
        {"content": [{"type": "tool_use", "id": "t1"}]},
        {"content": "not a list"},
        [1, 2, 3],
    ],
)
def test_anthropic_missing_content_is_invalid_format(payload) -> None:
    provider, _ = anthropic(json_response(200, payload))

    result = provider.generate("m", "k", "hi")

    assert result.error == "Invalid response format: missing content"
    assert result.error_kind is ErrorKind.PARSE


def test_deeply_nested_body_is_parse_error() -> None:
    provider, _ = anthropic(raw_response(200, "[" * 100000 + "]" * 100000))

    result = provider.generate("m", "k", "hi")

    assert result.error.startswith("JSON parse error: ")
    assert result.error_kind is ErrorKind.PARSE


def test_deeply_nested_error_body_falls_back_to_status() -> None:
    provider, _ = anthropic(raw_response(500, "[" * 100000 + "]" * 100000))

    result = provider.generate("m", "k", "hi")

    assert result.error == "HTTP 500 - " + "[" * 100
    assert result.error_kind is ErrorKind.API


def test_transport_error_is_reported_without_parsing(monkeypatch) -> None:
    def fail(*args, **kwargs):
        raise AssertionError("body must not be parsed")

    monkeypatch.setattr(base, "parse_payload", fail)
    monkeypatch.setattr(base, "extract_api_error", fail)
    provider, _ = anthropic(TransportResponse.failure(TransportError.CONNECTION))

    result = provider.generate("m", "k", "hi")

    assert result.error == "Connection failed"
    assert result.error_kind is ErrorKind.TRANSPORT


def test_anthropic_embed_is_unsupported_without_network() -> None:
    provider, transport = anthropic(json_response(200, {}))

    result = provider.embed("any-model", "k", "text")

    assert result.error == "Embeddings not supported for Anthropic provider"
    assert result.error_kind is ErrorKind.UNSUPPORTED
    assert transport.calls == []


# =========================================================
# Google
# =========================================================

def test_google_generate_reads_candidate_part_text() -> None:
    provider, transport = google(json_response(200, GEMINI_OK))

    result = provider.generate("gemini-1.5-flash", "AIza-key", "Say hello")

    assert result.value == "Hello from Gemini"
    call = transport.calls[0]
    assert call["base_url"] == "https://generativelanguage.googleapis.com"
    assert call["path"] == "/v1beta/models/gemini-1.5-flash:generateContent"
    assert call["headers"] == {"x-goog-api-key": "AIza-key", "content-type": "application/json"}
    assert call["body"] == {"contents": [{"parts": [{"text": "Say hello"}]}]}


@pytest.mark.parametrize(
    "payload",
    [
        {"candidates": []},
        {"candidates": [{"finishReason": "SAFETY"}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"promptFeedback": {"blockReason": "SAFETY"}},
    ],
)
def test_google_generate_missing_path(payload) -> None:
    provider, _ = google(json_response(200, payload))

    result = provider.generate("gemini-1.5-flash", "k", "hi")

    assert result.error == "Invalid response format: missing candidates or content"


def test_google_embed_round_trips_vector_in_order() -> None:
    values = [0.125, -0.5, 3, 1e-07, 0.0]
    provider, transport = google(json_response(200, {"embedding": {"values": values}}))

    result = provider.embed("text-embedding-004", "k", "embed me")

    assert result.error is None
    assert json.loads(result.value) == [float(v) for v in values]
    assert result.vector() == [0.125, -0.5, 3.0, 1e-07, 0.0]

    call = transport.calls[0]
    assert call["path"] == "/v1beta/models/text-embedding-004:embedContent"
    assert call["body"] == {"content": {"parts": [{"text": "embed me"}]}}


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"embedding": {}},
        {"embedding": {"values": "0.1,0.2"}},
        {"embedding": {"values": [0.1, "x"]}},
        {"embedding": {"values": [True, 0.2]}},
    ],
)
def test_google_embed_missing_values(payload) -> None:
    provider, _ = google(json_response(200, payload))

    result = provider.embed("text-embedding-004", "k", "hi")

    assert result.error == "Invalid response format: missing embedding.values"


@pytest.mark.parametrize(
    "body",
    [
        json.dumps({"embedding": {"values": [0.5, 10**400]}}),
        '{"embedding":{"values":[0.1,NaN]}}',
        '{"embedding":{"values":[Infinity,0.2]}}',
        '{"embedding":{"values":[-Infinity]}}',
    ],
)
def test_google_embed_rejects_values_outside_json_floats(body: str) -> None:
    provider, _ = google(raw_response(200, body))

    result = provider.embed("text-embedding-004", "k", "hi")

    assert result.error == "Invalid response format: missing embedding.values"
    assert result.error_kind is ErrorKind.PARSE


def test_google_embed_error_precedence() -> None:
    body = {"error": {"code": 400, "message": "API key not valid.", "status": "INVALID_ARGUMENT"}}
    provider, _ = google(json_response(400, body))

    result = provider.embed("text-embedding-004", "bad", "hi")

    assert result.error == "API key not valid."


def test_google_uses_configured_api_version() -> None:
    transport = StubTransport(json_response(200, GEMINI_OK))
    provider = GoogleProvider(Settings(google_api_version="v1"), transport)

    provider.generate("gemini-pro", "k", "hi")

    assert transport.calls[0]["path"] == "/v1/models/gemini-pro:generateContent"
