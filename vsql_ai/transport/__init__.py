"""HTTP transport package.

Architectural role:
    Provides the vendor-neutral POST primitive used by `vsql_ai.llm` providers
    and the fixed transport-error vocabulary reported to callers.
"""

from vsql_ai.transport.http_client import (
    ParsedUrl,
    TransportError,
    TransportResponse,
    classify_transport_error,
    parse_url,
    post,
)

__all__ = [
    "ParsedUrl",
    "TransportError",
    "TransportResponse",
    "classify_transport_error",
    "parse_url",
    "post",
]
