"""Credential masking for log and diagnostic output.

Rule model:
    - Header names are matched case-insensitively against a fixed set of
      credential-bearing headers.
    - Masked values keep at most the last four characters, and only when the
      secret is long enough for that to reveal little.

Determinism:
    Pure functions; output depends only on the input values.
"""

SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "proxy-authorization",
        "x-api-key",
        "x-goog-api-key",
    }
)

MASK = "****"


def mask_secret(value: str | None) -> str:
    """Return a masked rendering of a secret suitable for logs."""
    if not value:
        return MASK
    if len(value) < 12:
        return MASK
    return f"{MASK}{value[-4:]}"


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Copy `headers` with credential-bearing values masked."""
    return {
        name: mask_secret(value) if name.lower() in SENSITIVE_HEADERS else value
        for name, value in headers.items()
    }
