"""Logging setup and argument redaction for tool calls."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List


_SENSITIVE_KEYS = re.compile(r"(token|secret|api[_-]?key|signing[_-]?key|password)", re.IGNORECASE)
_MAX_VALUE_LENGTH = 200


def configure_logging(level: str) -> None:
    # stderr only; stdout carries the stdio transport
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def redact_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Mask credential-like keys and shorten long values (message bodies, attachments)."""
    return {key: _redact_value(key, value) for key, value in payload.items()}


def _redact_value(key: str, value: Any) -> Any:
    if _SENSITIVE_KEYS.search(key):
        return "***REDACTED***"
    if isinstance(value, dict):
        return redact_payload(value)
    if isinstance(value, list):
        items: List[Any] = [_redact_value(key, item) for item in value]
        return items
    if isinstance(value, str) and len(value) > _MAX_VALUE_LENGTH:
        return f"{value[:_MAX_VALUE_LENGTH]}... ({len(value)} chars)"
    return value
