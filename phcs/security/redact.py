"""Helpers for masking owner contact details in logs and exports."""

from __future__ import annotations

import os

_BOOL_TRUE = {"1", "true", "yes", "on"}
_REDACT_ENABLED = os.getenv("LOG_REDACT", "true").lower() in _BOOL_TRUE


def is_redaction_enabled() -> bool:
    return _REDACT_ENABLED


def mask_email(value: str | None) -> str | None:
    if not _REDACT_ENABLED or not value or "@" not in value:
        return value
    local, _, domain = value.partition("@")
    if not local:
        return "***@" + domain
    return f"{local[0]}***@{domain}"


def mask_phone(value: str | None) -> str | None:
    if not _REDACT_ENABLED or not value:
        return value
    digits = [ch for ch in value if ch.isdigit()]
    if len(digits) < 4:
        return "***"
    return f"***-***-{''.join(digits[-4:])}"
