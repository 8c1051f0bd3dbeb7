"""Secret masking utilities for Taurus.

Agent endpoints are opaque connection descriptors: sometimes a URL, often a
raw API token read from the environment. Anything that may end up in a log
line, an error message or a status table goes through these helpers first.
"""

from typing import Any
from urllib.parse import urlsplit, urlunsplit

# Sensitive field names that should be masked
SENSITIVE_FIELD_NAMES = frozenset(
    {
        "password",
        "api_key",
        "apikey",
        "api-key",
        "secret",
        "token",
        "credential",
        "auth",
        "key",
        "private",
        "bearer",
        "authorization",
    }
)

# Sensitive value prefixes that indicate secrets
SENSITIVE_PREFIXES = (
    "sk-",
    "pk-",
    "api-",
    "apify_api_",
    "pplx-",
    "fc-",
    "bearer ",
    "token ",
    "secret_",
)


def mask_api_key(api_key: str, visible_chars: int = 4) -> str:
    """Mask an API key for safe logging/display.

    Args:
        api_key: The API key to mask.
        visible_chars: Number of characters to show at the end (default 4).

    Returns:
        Masked API key like "sk-...xxxx" or "<empty>" if key is empty.

    Example:
        >>> mask_api_key("sk-1234567890abcdef")
        'sk-...cdef'
    """
    if not api_key:
        return "<empty>"

    if len(api_key) <= visible_chars + 4:
        return "*" * len(api_key)

    if "-" in api_key[:6]:
        prefix_end = api_key.index("-") + 1
        return f"{api_key[:prefix_end]}...{api_key[-visible_chars:]}"

    return f"...{api_key[-visible_chars:]}"


def is_url(value: str) -> bool:
    """Check whether an endpoint descriptor is an http(s) URL."""
    parts = urlsplit(value)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def mask_endpoint(endpoint: str | None) -> str:
    """Render an agent endpoint without leaking credentials.

    URLs keep scheme, host and path but lose user info and query string.
    Anything else is treated as a token and masked.

    Example:
        >>> mask_endpoint("http://user:pw@localhost:9001/mcp?key=abc")
        'http://localhost:9001/mcp'
        >>> mask_endpoint("apify_api_1234567890")
        '...7890'
    """
    if not endpoint:
        return "<unset>"
    if is_url(endpoint):
        parts = urlsplit(endpoint)
        host = parts.hostname or ""
        if parts.port:
            host = f"{host}:{parts.port}"
        return urlunsplit((parts.scheme, host, parts.path, "", ""))
    if endpoint == "demo-key":
        return endpoint
    return mask_api_key(endpoint)


def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name indicates sensitive data."""
    if not field_name:
        return False

    field_lower = field_name.lower()
    return any(sensitive in field_lower for sensitive in SENSITIVE_FIELD_NAMES)


def is_sensitive_value(value: Any) -> bool:
    """Check if a value looks like sensitive data (API key, token, etc)."""
    if not isinstance(value, str):
        return False

    value_lower = value.lower()
    return any(value_lower.startswith(prefix) for prefix in SENSITIVE_PREFIXES)


def sanitize_for_logging(data: dict[str, Any]) -> dict[str, Any]:
    """Create a copy of data with sensitive values masked.

    ``endpoint`` keys are always rendered through ``mask_endpoint``.

    Example:
        >>> sanitize_for_logging({"api_key": "sk-secret123", "name": "test"})
        {'api_key': '<REDACTED>', 'name': 'test'}
    """
    result: dict[str, Any] = {}
    for key, value in data.items():
        if key == "endpoint" and (value is None or isinstance(value, str)):
            result[key] = mask_endpoint(value)
        elif is_sensitive_field(key):
            result[key] = "<REDACTED>"
        elif isinstance(value, str) and is_sensitive_value(value):
            result[key] = mask_api_key(value)
        elif isinstance(value, dict):
            result[key] = sanitize_for_logging(value)
        else:
            result[key] = value
    return result
