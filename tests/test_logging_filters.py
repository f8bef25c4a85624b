"""Tests for contact-detail scrubbing in log output."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator

import pytest

from phcs.security.logging_filters import (
    SensitiveFilter,
    install_sensitive_filter,
    scrub,
)


@pytest.fixture()
def phcs_stream() -> Iterator[io.StringIO]:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(name)s %(message)s"))
    parent = logging.getLogger("phcs")
    parent.addHandler(handler)
    try:
        yield stream
    finally:
        parent.removeHandler(handler)
        for flt in [f for f in parent.filters if isinstance(f, SensitiveFilter)]:
            parent.removeFilter(flt)


def test_scrub_masks_phone_and_email_but_not_dates() -> None:
    message = scrub("Call (319) 555-0182 or jane@example.com before 2025-01-14")

    assert message == "Call ***-***-0182 or j***@example.com before 2025-01-14"


def test_child_logger_records_are_scrubbed_by_parent_handlers(
    phcs_stream: io.StringIO,
) -> None:
    install_sensitive_filter("phcs")

    logging.getLogger("phcs.services.import_commit_service").warning(
        "Owner %s reachable at %s", "jane@example.com", "319-555-0182"
    )

    output = phcs_stream.getvalue()
    assert "phcs.services.import_commit_service" in output
    assert "319-555-0182" not in output
    assert "jane@example.com" not in output
    assert "***-***-0182" in output
    assert "j***@example.com" in output


def test_install_is_idempotent(phcs_stream: io.StringIO) -> None:
    install_sensitive_filter("phcs")
    install_sensitive_filter("phcs")

    (handler,) = [
        h
        for h in logging.getLogger("phcs").handlers
        if getattr(h, "stream", None) is phcs_stream
    ]
    assert sum(isinstance(f, SensitiveFilter) for f in handler.filters) == 1
