"""
Module: headers.py
Description: Header normalization for webhook requests.

Endpoint headers may be stored as a flat map or as a list of key/value
objects (the shape databases tend to hand back). Both are reduced to a
single string map, malformed entries are dropped with a warning, and the
per-request defaults are applied on top.

Key Components:
- coerce_headers(): Reduce either input shape to Dict[str, str]
- build_request_headers(): Canonical map plus defaults and attempt header

Dependencies: typing, logger
Author: Webhook Dispatch Team
"""

from typing import Any, Dict, Mapping, Optional

from webhook_dispatch.utils.logger import get_logger

logger = get_logger(__name__)

CONTENT_TYPE_HEADER = "Content-Type"
DEFAULT_CONTENT_TYPE = "application/json"
ATTEMPT_HEADER = "X-Webhook-Attempt"


def _pair_field(item: Mapping[Any, Any], name: str) -> Any:
    # "key" and "value" may arrive as plain strings or enum-like members
    for candidate, value in item.items():
        if str(getattr(candidate, 'value', candidate)) == name:
            return value
    return None


def coerce_headers(raw: Any) -> Dict[str, str]:
    """
    Reduce raw endpoint headers to a canonical string map.

    Args:
        raw: Mapping of header names to values, list of
            {"key": ..., "value": ...} objects, or None

    Returns:
        Header map with string keys and values. Unknown shapes yield {}.

    Example:
        >>> coerce_headers([{"key": "X-Id", "value": 7}, "junk"])
        {'X-Id': '7'}
    """
    if raw is None:
        return {}

    if isinstance(raw, Mapping):
        headers: Dict[str, str] = {}
        for key, value in raw.items():
            if key is None or value is None:
                logger.warning("Skipping malformed header entry", key=repr(key), value=repr(value))
                continue
            headers[str(key)] = str(value)
        return headers

    if isinstance(raw, (list, tuple)):
        headers = {}
        for item in raw:
            if not isinstance(item, Mapping):
                logger.warning("Skipping non-map header item", item=repr(item))
                continue

            key = _pair_field(item, "key")
            value = _pair_field(item, "value")
            if key is None or value is None or key == "":
                logger.warning("Skipping malformed header item", item=repr(item))
                continue

            headers[str(key)] = str(value)
        return headers

    logger.warning(
        "Unknown header format, expected map or list",
        header_type=type(raw).__name__
    )
    return {}


def build_request_headers(
    raw: Any,
    attempt: int = 0,
    default_headers: Optional[Mapping[str, str]] = None
) -> Dict[str, str]:
    """
    Build the headers sent with one webhook POST.

    Default headers are applied first and the endpoint's own headers
    override them. Content-Type is injected only when absent, and the
    attempt header only for attempts after the zeroth.

    Args:
        raw: Endpoint headers in any shape accepted by coerce_headers()
        attempt: Current attempt number
        default_headers: Headers shared by every endpoint of a webhook

    Returns:
        Header map ready for the HTTP request
    """
    headers = coerce_headers(default_headers)
    headers.update(coerce_headers(raw))

    if CONTENT_TYPE_HEADER not in headers:
        headers[CONTENT_TYPE_HEADER] = DEFAULT_CONTENT_TYPE
    if attempt > 0:
        headers[ATTEMPT_HEADER] = str(attempt)

    return headers
