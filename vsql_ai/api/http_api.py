"""HTTP API adapter for the vsql_ai extension functions.

Architectural role:
- Expose the extension's host functions over HTTP for callers that are not
  the database host (tooling, smoke tests, other services).
- Translate JSON requests into the host calling convention and
  `FunctionResult` values back into JSON.

Endpoint responsibilities:
- `GET /v1/functions`: describe the extension and its functions.
- `POST /v1/functions/{name}`: run one function for one set of arguments.

Response formatting:
- Value -> 200 `{"type": "value", "value": ..., "actual_len": ...}`.
- NULL -> 200 `{"type": "null", "value": null, "actual_len": 0}`.
- Error -> 400 `{"type": "error", "error": ...}`.
- Unknown function -> 404 `{"error": "Unknown function: <name>"}`.

Side effects:
- Loads environment variables (and `.env`) when the module-level app is built.
  An invalid `VSQL_AI_*` value is logged and its `ValueError` propagates, so
  the server does not start.
- Credentials from request bodies are forwarded to the provider only.
"""

import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from vsql_ai.api.extension import Extension, build_extension
from vsql_ai.api.functions import ResultType
from vsql_ai.config import load_settings

logger = logging.getLogger(__name__)


class FunctionCall(BaseModel):
    """Arguments for one function call; omitted fields are SQL NULL."""

    provider: str | None = None
    model: str | None = None
    api_key: str | None = None
    text: str | None = None


def create_app(extension: Extension | None = None) -> FastAPI:
    """Build the FastAPI application around an extension definition."""
    if extension is None:
        try:
            settings = load_settings()
        except ValueError as exc:
            logger.error("Configuration error: %s", exc)
            raise
        extension = build_extension(settings)
    active = extension
    api = FastAPI(title=active.name, version=active.version)

    @api.get("/v1/functions")
    def list_functions():
        return active.describe()

    @api.post("/v1/functions/{name}")
    def call_function(name: str, call: FunctionCall):
        if name not in active.functions:
            return JSONResponse(status_code=404, content={"error": f"Unknown function: {name}"})

        result = active.call(name, call.provider, call.model, call.api_key, call.text)

        if result.type is ResultType.ERROR:
            return JSONResponse(
                status_code=400,
                content={"type": "error", "error": result.error_msg},
            )
        if result.type is ResultType.NULL:
            return {"type": "null", "value": None, "actual_len": 0}
        return {"type": "value", "value": result.text, "actual_len": result.actual_len}

    return api


app = create_app()
