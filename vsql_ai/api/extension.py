"""Explicit extension definition for the host runtime.

Architectural role:
    Describes the functions the extension exposes (name, parameters, return
    type, result buffer size) and binds each to its boundary-adapter
    implementation. The definition is constructed once at startup by
    `build_extension` and passed to the HTTP and CLI surfaces, instead of being
    registered through load-time side effects.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from vsql_ai.api.functions import FunctionResult, ai_prompt, create_embed
from vsql_ai.config import MAX_OUTPUT_BUFFER_SIZE, Settings
from vsql_ai.llm.registry import ProviderRegistry, build_default_registry

logger = logging.getLogger(__name__)

EXTENSION_NAME = "vsql_ai"
EXTENSION_VERSION = "0.0.1"


@dataclass(frozen=True)
class FunctionDef:
    name: str
    params: tuple[str, ...]
    impl: Callable[..., FunctionResult]
    returns: str = "STRING"
    buffer_size: int = MAX_OUTPUT_BUFFER_SIZE


@dataclass
class Extension:
    """A named, versioned set of host functions sharing one provider registry."""

    name: str
    version: str
    registry: ProviderRegistry
    max_error_len: int
    functions: dict[str, FunctionDef] = field(default_factory=dict)

    def add(self, function: FunctionDef) -> "Extension":
        if function.name in self.functions:
            raise ValueError(f"Function already defined: {function.name}")
        self.functions[function.name] = function
        return self

    def get(self, name: str) -> FunctionDef:
        try:
            return self.functions[name]
        except KeyError:
            raise KeyError(f"Unknown function: {name}") from None

    def call(self, name: str, *args: str | None) -> FunctionResult:
        """Invoke a function the way the host does for one row."""
        function = self.get(name)
        if len(args) != len(function.params):
            raise TypeError(f"{name} expects {len(function.params)} arguments, got {len(args)}")
        return function.impl(
            *args,
            registry=self.registry,
            max_str_len=function.buffer_size,
            max_error_len=self.max_error_len,
        )

    def describe(self) -> dict:
        return {
            "extension": self.name,
            "version": self.version,
            "functions": [
                {
                    "name": function.name,
                    "params": list(function.params),
                    "returns": function.returns,
                    "buffer_size": function.buffer_size,
                }
                for function in self.functions.values()
            ],
        }


def build_extension(
    settings: Settings | None = None,
    registry: ProviderRegistry | None = None,
) -> Extension:
    """Assemble the `vsql_ai` extension.

    Args:
        settings: Configuration snapshot; defaults are used when omitted.
        registry: Provider registry; built from `settings` when omitted.
    """
    resolved = settings or Settings()
    extension = Extension(
        name=EXTENSION_NAME,
        version=EXTENSION_VERSION,
        registry=registry if registry is not None else build_default_registry(resolved),
        max_error_len=resolved.max_error_length,
    )
    extension.add(
        FunctionDef(
            name="ai_prompt",
            params=("provider", "model", "api_key", "prompt"),
            impl=ai_prompt,
            buffer_size=resolved.buffer_size,
        )
    ).add(
        FunctionDef(
            name="create_embed",
            params=("provider", "model", "api_key", "text"),
            impl=create_embed,
            buffer_size=resolved.buffer_size,
        )
    )
    logger.debug("Built extension %s %s", extension.name, extension.version)
    return extension
