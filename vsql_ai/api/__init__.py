"""vsql_ai API adapter package.

Architectural role:
- Defines the boundary between callers (the database host, HTTP clients, the
  terminal) and the provider layer.
- Performs argument validation and result shaping.
- Delegates provider work to `vsql_ai.llm`.
"""
