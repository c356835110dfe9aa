"""Redaction helpers so debug logs never carry keys or user content"""

import hashlib
import json
import logging
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

SENSITIVE_FIELDS = (
    "api_key", "apikey", "key", "token", "secret", "password", "credential",
    "authorization", "auth", "bearer", "content", "data", "image", "audio",
)

MAX_STRING_LENGTH = 500
TRUNCATED_PREFIX = 100


def is_sensitive(name: str) -> bool:
    lowered = name.lower()
    return any(field in lowered for field in SENSITIVE_FIELDS)


def redact(value: str) -> str:
    """Replace a value with a short hash tag that still tells values apart"""
    if not value:
        return ""
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()[:8]
    return f"[REDACTED:{digest}]"


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    return {
        name: redact(value) if is_sensitive(name) else value
        for name, value in headers.items()
    }


def redact_url(url: str) -> str:
    """Redact sensitive query parameters (Gemini passes its key as ?key=)"""
    parts = urlsplit(url)
    if not parts.query:
        return url
    query = [
        (name, redact(value) if is_sensitive(name) else value)
        for name, value in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunsplit(parts._replace(query=urlencode(query)))


def _truncate(value: str) -> str:
    if len(value) > MAX_STRING_LENGTH:
        return value[:TRUNCATED_PREFIX] + "... [TRUNCATED]"
    return value


def redact_value(value: Any, sensitive: bool = False) -> Any:
    """Recursively redact a decoded JSON value"""
    if isinstance(value, dict):
        return {
            key: redact_value(item, is_sensitive(str(key)))
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact_value(item) for item in value]
    if isinstance(value, str):
        return redact(value) if sensitive else _truncate(value)
    return value


def dump_json(logger: logging.Logger, label: str, payload: Any):
    """Log a redacted, indented JSON rendering of payload at DEBUG"""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    if isinstance(payload, (bytes, str)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to decode payload for logging: {e}")
            return
    safe = redact_value(payload)
    logger.debug(f"{label}: {json.dumps(safe, indent=2)}")
