"""Shared fixtures: a recording transport stub and response builders."""

import json

import pytest

from vsql_ai.llm.registry import build_default_registry
from vsql_ai.transport.http_client import TransportResponse


class StubTransport:
    """Stands in for `http_client.post` and records every call."""

    def __init__(self, response: TransportResponse | None = None) -> None:
        self.response = response or json_response(200, {})
        self.calls: list[dict] = []

    def __call__(self, base_url, path, body, headers, timeout, **kwargs):
        self.calls.append(
            {
                "base_url": base_url,
                "path": path,
                "body": body,
                "headers": headers,
                "timeout": timeout,
                **kwargs,
            }
        )
        return self.response


def json_response(status: int, payload) -> TransportResponse:
    return TransportResponse(status_code=status, body=json.dumps(payload).encode("utf-8"))


def raw_response(status: int, body: str) -> TransportResponse:
    return TransportResponse(status_code=status, body=body.encode("utf-8"))


ANTHROPIC_OK = {
    "id": "msg_01",
    "type": "message",
    "role": "assistant",
    "content": [{"type": "text", "text": "Hello from Claude"}],
    "stop_reason": "end_turn",
}

GEMINI_OK = {
    "candidates": [
        {
            "content": {"role": "model", "parts": [{"text": "Hello from Gemini"}]},
            "finishReason": "STOP",
        }
    ]
}


@pytest.fixture
def stub_transport():
    return StubTransport()


@pytest.fixture
def stub_registry(stub_transport):
    return build_default_registry(transport=stub_transport)
