"""Provider package.

Architectural role:
    Implements the vendor-neutral `generate`/`embed` contract on top of
    `vsql_ai.transport`.

Module split:
    - `base`: contract, `ProviderResult`, shared parsing and error precedence.
    - `anthropic`, `google`: vendor wire formats.
    - `registry`: name -> provider resolution.
"""

from vsql_ai.llm.anthropic import AnthropicProvider
from vsql_ai.llm.base import ErrorKind, Provider, ProviderResult
from vsql_ai.llm.google import GoogleProvider
from vsql_ai.llm.registry import (
    ProviderRegistry,
    UnknownProviderError,
    build_default_registry,
)

__all__ = [
    "AnthropicProvider",
    "ErrorKind",
    "GoogleProvider",
    "Provider",
    "ProviderRegistry",
    "ProviderResult",
    "UnknownProviderError",
    "build_default_registry",
]
