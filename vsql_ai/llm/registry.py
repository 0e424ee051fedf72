"""Provider name -> provider factory registry.

Architectural role:
    Resolves the provider name supplied by the caller to a fresh provider
    instance. The registry is built explicitly at startup (see
    `build_default_registry`) and handed to the boundary adapter; nothing is
    registered as an import side effect.

Matching:
    Exact and case-sensitive. Unknown names raise `UnknownProviderError`.
"""

import logging
from collections.abc import Callable

from vsql_ai.config import Settings
from vsql_ai.llm.anthropic import AnthropicProvider
from vsql_ai.llm.base import Provider, Transport
from vsql_ai.llm.google import GoogleProvider
from vsql_ai.transport.http_client import post

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[], Provider]


class UnknownProviderError(LookupError):
    """Raised when a provider name has no registry entry."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown provider: {self.name}"


class ProviderRegistry:
    """Read-only after startup; safe to share across concurrent invocations."""

    def __init__(self) -> None:
        self._factories: dict[str, ProviderFactory] = {}

    def register(self, name: str, factory: ProviderFactory) -> None:
        if not name:
            raise ValueError("Provider name cannot be empty.")
        if name in self._factories:
            raise ValueError(f"Provider already registered: {name}")
        self._factories[name] = factory

    def has(self, name: str) -> bool:
        return name in self._factories

    def names(self) -> list[str]:
        return sorted(self._factories)

    def resolve(self, name: str) -> Provider:
        """Construct a new provider for `name`."""
        factory = self._factories.get(name)
        if factory is None:
            raise UnknownProviderError(name)
        return factory()


def build_default_registry(settings: Settings | None = None, transport: Transport = post) -> ProviderRegistry:
    """Register every bundled vendor against one settings snapshot."""
    resolved = settings or Settings()
    registry = ProviderRegistry()
    registry.register("anthropic", lambda: AnthropicProvider(resolved, transport))
    registry.register("google", lambda: GoogleProvider(resolved, transport))
    logger.debug("Registered providers: %s", ", ".join(registry.names()))
    return registry
