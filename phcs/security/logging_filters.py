"""Logging filters that scrub owner contact details."""

from __future__ import annotations

import logging
import re

from phcs.security.redact import is_redaction_enabled, mask_email, mask_phone

_EMAIL_PATTERN = re.compile(r"[^\s@'\"<>]+@[^\s@'\"<>]+\.[A-Za-z]{2,}")
_PHONE_PATTERN = re.compile(
    r"(?<![\w-])(?:\+?1[\s.-]?)?(?:\(\d{3}\)|\d{3})[\s.-]?\d{3}[\s.-]?\d{4}(?![\w-])"
)


def scrub(message: str) -> str:
    """Mask email addresses and phone-like digit runs in ``message``."""
    message = _EMAIL_PATTERN.sub(lambda match: mask_email(match.group(0)) or "", message)
    return _PHONE_PATTERN.sub(lambda match: mask_phone(match.group(0)) or "", message)


class SensitiveFilter(logging.Filter):
    """Mask contact details in log messages and their arguments."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not is_redaction_enabled():
            return True
        if isinstance(record.msg, str):
            record.msg = scrub(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(
                scrub(arg) if isinstance(arg, str) else arg for arg in record.args
            )
        return True


def install_sensitive_filter(*logger_names: str) -> None:
    """Attach a ``SensitiveFilter`` to the named loggers and all their handlers.

    Logger filters only see records created on that logger, so records
    propagated up from ``phcs.*`` loggers are scrubbed by the handler filters.
    """
    targets: list[logging.Filterer] = []
    for name in logger_names or ("",):
        target_logger = logging.getLogger(name)
        targets.append(target_logger)
        targets.extend(target_logger.handlers)
    for target in targets:
        if not any(isinstance(flt, SensitiveFilter) for flt in target.filters):
            target.addFilter(SensitiveFilter())


__all__ = ["SensitiveFilter", "install_sensitive_filter", "scrub"]
