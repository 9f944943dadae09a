from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

REDACTED_VALUE = "<redacted>"
# Matched case-insensitively against record keys. VPN connections carry
# tunnel pre-shared keys and the full customer gateway config document.
SENSITIVE_KEY_SUBSTRINGS = (
    "presharedkey",
    "customergatewayconfiguration",
    "password",
    "secret",
    "privatekey",
)


def _is_sensitive_key(key: Any) -> bool:
    if not isinstance(key, str):
        return False
    lowered = key.lower()
    return any(token in lowered for token in SENSITIVE_KEY_SUBSTRINGS)


def sanitize_for_json(value: Any) -> Any:
    """
    Convert boto3 response values to JSON-safe forms and redact sensitive fields.
    """
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode("utf-8", "replace")
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        out = {}
        for k, v in value.items():
            if _is_sensitive_key(k):
                out[k] = REDACTED_VALUE
            else:
                out[k] = sanitize_for_json(v)
        return out
    if isinstance(value, (list, tuple, set)):
        return [sanitize_for_json(v) for v in value]
    return value
