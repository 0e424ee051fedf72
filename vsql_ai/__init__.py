"""vsql_ai: uniform text-generation and embedding calls across AI providers."""

__version__ = "0.0.1"
