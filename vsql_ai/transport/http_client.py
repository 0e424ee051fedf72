"""Single-shot HTTPS POST transport shared by every provider.

Architectural role:
    Executes exactly one HTTP request per call and hands the raw status code and
    body back to the provider layer, which owns vendor-specific parsing.

Connection model:
    A fresh `requests.Session` is opened per call and closed before returning.
    No pooling, no keep-alive, no retries.

Failure handling model:
    - A received response of any status (including 4xx/5xx) is returned as-is.
    - When no response is obtained, the failure is classified into the fixed
      `TransportError` vocabulary. Callers surface these strings verbatim.
    - Malformed base URLs are reported as `Invalid URL format` without touching
      the network.

Timeouts:
    The caller-supplied timeout bounds the connect and read phases; the socket
    timeout set from it also bounds writes. Timeouts surface as
    `Connection failed` or `Read error`.
"""

import errno
import http.client
import json
import logging
import re
import ssl
from dataclasses import dataclass

import requests

from vsql_ai.config import MAX_REDIRECTS, REQUEST_TIMEOUT_SECONDS
from vsql_ai.safety.redaction import redact_headers

logger = logging.getLogger(__name__)

_URL_PATTERN = re.compile(r"^(https?)://([^:/\s?#]+)(?::(\d+))?((?:/[^\s?#]*)?)$")
_DEFAULT_PORTS = {"https": 443, "http": 80}
_BIND_ERRNOS = {errno.EADDRINUSE, errno.EADDRNOTAVAIL}
_CERT_LIBRARIES = {"PEM", "X509"}


class TransportError:
    """Fixed vocabulary for requests that produced no HTTP response."""

    INVALID_URL = "Invalid URL format"
    CONNECTION = "Connection failed"
    BIND_IP_ADDRESS = "Failed to bind IP address"
    READ = "Read error"
    WRITE = "Write error"
    TOO_MANY_REDIRECTS = "Too many redirects"
    CANCELED = "Request canceled"
    SSL_CONNECTION = "SSL connection failed"
    SSL_LOADING_CERTS = "Failed to load SSL certificates"
    SSL_SERVER_VERIFICATION = "SSL server verification failed"
    UNSUPPORTED_ENCODING = "Unsupported encoding"
    COMPRESSION = "Compression error"
    UNKNOWN = "Unknown error"


@dataclass(frozen=True)
class ParsedUrl:
    scheme: str
    host: str
    port: int
    origin: str
    base_path: str = ""

    def join(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.origin}{self.base_path}{path}"


@dataclass(frozen=True)
class TransportResponse:
    """Outcome of one POST.

    `transport_error` is set only when no HTTP response was received; in that
    case `status_code` is 0 and `body` is empty.
    """

    status_code: int = 0
    body: bytes = b""
    transport_error: str | None = None

    @classmethod
    def failure(cls, message: str) -> "TransportResponse":
        return cls(transport_error=message)

    @property
    def is_success(self) -> bool:
        return self.transport_error is None and 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def parse_url(base_url: str) -> ParsedUrl | None:
    """Validate `scheme://host[:port][/prefix]` and fill in the scheme's default port.

    A path prefix (for example a gateway mount point) is kept without its
    trailing slash and placed in front of every request path.
    """
    match = _URL_PATTERN.match(base_url or "")
    if not match:
        return None

    scheme, host, port_text, prefix = match.groups()
    if port_text is None:
        port = _DEFAULT_PORTS[scheme]
        origin = f"{scheme}://{host}"
    else:
        port = int(port_text)
        if not 0 < port <= 65535:
            return None
        origin = f"{scheme}://{host}:{port}"

    return ParsedUrl(scheme=scheme, host=host, port=port, origin=origin, base_path=prefix.rstrip("/"))


def post(
    base_url: str,
    path: str,
    body,
    headers: dict[str, str],
    timeout: float = REQUEST_TIMEOUT_SECONDS,
    *,
    verify=True,
    max_redirects: int = MAX_REDIRECTS,
) -> TransportResponse:
    """POST `body` to `base_url + path` and return the raw outcome.

    Args:
        base_url: `scheme://host[:port]` with an optional path prefix; anything
            else is rejected.
        path: Request path appended to the base URL.
        body: JSON-serializable mapping, or pre-encoded `str`/`bytes`.
        headers: Request headers, passed through unchanged.
        timeout: Seconds allowed for each of the connect/read/write phases.
        verify: `True`, `False`, or a CA bundle path (requests semantics).
        max_redirects: Redirect budget before `Too many redirects`.

    Returns:
        `TransportResponse` with either status/body or a transport error.

    Raises:
        ValueError: When `timeout` is not positive.
    """
    if timeout <= 0:
        raise ValueError(f"timeout must be positive, got {timeout}")

    parsed = parse_url(base_url)
    if parsed is None:
        logger.warning("Rejected malformed base URL %r", base_url)
        return TransportResponse.failure(TransportError.INVALID_URL)

    url = parsed.join(path)
    request_headers = {"Connection": "close", **headers}
    logger.debug("POST %s headers=%s", url, redact_headers(request_headers))

    session = requests.Session()
    session.max_redirects = max_redirects
    try:
        response = session.post(
            url,
            data=_encode_body(body),
            headers=request_headers,
            timeout=(timeout, timeout),
            verify=verify,
        )
    except KeyboardInterrupt:
        logger.warning("POST %s interrupted", url)
        return TransportResponse.failure(TransportError.CANCELED)
    except (requests.exceptions.RequestException, OSError, UnicodeError) as exc:
        message = classify_transport_error(exc)
        logger.warning("POST %s failed: %s (%s)", url, message, type(exc).__name__)
        return TransportResponse.failure(message)
    finally:
        session.close()

    logger.debug("POST %s -> HTTP %s (%d bytes)", url, response.status_code, len(response.content))
    return TransportResponse(status_code=response.status_code, body=response.content)


def classify_transport_error(exc: BaseException) -> str:
    """Map an exception raised while sending a request to the fixed vocabulary."""
    if isinstance(exc, KeyboardInterrupt):
        return TransportError.CANCELED
    if isinstance(exc, requests.exceptions.TooManyRedirects):
        return TransportError.TOO_MANY_REDIRECTS
    if isinstance(
        exc,
        (
            requests.exceptions.InvalidURL,
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
            requests.exceptions.URLRequired,
        ),
    ):
        return TransportError.INVALID_URL
    if isinstance(exc, requests.exceptions.ContentDecodingError):
        return TransportError.COMPRESSION

    causes = list(_iter_causes(exc))

    if isinstance(exc, requests.exceptions.InvalidHeader) or _any_instance(causes, UnicodeError):
        return TransportError.UNSUPPORTED_ENCODING
    if _any_instance(causes, ssl.SSLCertVerificationError):
        return TransportError.SSL_SERVER_VERIFICATION
    if _is_cert_loading_failure(causes):
        return TransportError.SSL_LOADING_CERTS
    if isinstance(exc, requests.exceptions.SSLError) or _any_instance(causes, ssl.SSLError):
        return TransportError.SSL_CONNECTION
    if isinstance(exc, (requests.exceptions.ConnectTimeout, requests.exceptions.ProxyError)):
        return TransportError.CONNECTION
    if isinstance(exc, (requests.exceptions.ReadTimeout, requests.exceptions.ChunkedEncodingError)):
        return TransportError.READ
    if any(isinstance(cause, OSError) and cause.errno in _BIND_ERRNOS for cause in causes):
        return TransportError.BIND_IP_ADDRESS
    if _any_instance(causes, BrokenPipeError):
        return TransportError.WRITE
    if _any_instance(causes, (ConnectionResetError, http.client.IncompleteRead)):
        return TransportError.READ
    if isinstance(exc, requests.exceptions.ConnectionError):
        return TransportError.CONNECTION
    if isinstance(exc, requests.exceptions.Timeout):
        return TransportError.READ
    return TransportError.UNKNOWN


def _encode_body(body) -> bytes:
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def _iter_causes(exc: BaseException):
    """Yield `exc` and every exception reachable through its wrapping chain.

    requests wraps urllib3 errors, which in turn carry the socket or ssl error
    in `reason` or `args`.
    """
    seen = set()
    pending = [exc]
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current

        linked = [current.__cause__, current.__context__, getattr(current, "reason", None)]
        linked.extend(current.args)
        for candidate in linked:
            if isinstance(candidate, BaseException):
                pending.append(candidate)


def _any_instance(causes, types) -> bool:
    return any(isinstance(cause, types) for cause in causes)


def _is_cert_loading_failure(causes) -> bool:
    in_tls = _any_instance(causes, (ssl.SSLError, requests.exceptions.SSLError))
    for cause in causes:
        if in_tls and isinstance(cause, FileNotFoundError):
            return True
        if isinstance(cause, ssl.SSLError) and getattr(cause, "library", None) in _CERT_LIBRARIES:
            return True
        # requests raises a plain OSError for an unusable `verify` path.
        if type(cause) is OSError and "certificate" in str(cause).lower():
            return True
    return False
