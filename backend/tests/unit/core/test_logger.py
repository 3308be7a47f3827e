"""Unit tests for the logging utilities."""

from __future__ import annotations

import json
import logging

from boxoffice.core.logger import JSONFormatter, configure_logging, token_fingerprint


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    configure_logging("DEBUG")
    try:
        assert logging.getLogger().level == logging.DEBUG
    finally:
        configure_logging("INFO")


def test_formatter_emits_json_with_extras() -> None:
    record = logging.LogRecord("auth", logging.INFO, __file__, 1, "auth.login", None, None)
    record.account_id = "acc-1"
    record.token_fp = "abc123"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "auth.login"
    assert payload["level"] == "INFO"
    assert payload["account_id"] == "acc-1"
    assert payload["token_fp"] == "abc123"


def test_token_fingerprint_hides_the_token() -> None:
    fp = token_fingerprint("header.payload.signature")
    assert fp is not None and len(fp) == 12
    assert "payload" not in fp
    assert fp == token_fingerprint("header.payload.signature")
    assert token_fingerprint("") is None
    assert token_fingerprint(None) is None
