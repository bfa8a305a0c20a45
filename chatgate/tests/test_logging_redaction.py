"""Structured logging helpers and secret redaction."""
from __future__ import annotations

import json
import logging

from chatgate.base.log_support import JsonFormatter, LogContext
from chatgate.base.log_support.redaction import mask_secret, redact_headers, redact_url
from chatgate.base.logging import (
    REQUIRED_NORMALIZED_KEYS,
    _parse_level,  # type: ignore[attr-defined]
    configure_logger,
    get_logger,
    log_event,
    normalized_log_event,
)


def test_parse_level_variants():
    assert _parse_level(None) == logging.INFO  # nosec B101
    assert _parse_level("debug") == logging.DEBUG  # nosec B101
    assert _parse_level("WARN") == logging.WARNING  # nosec B101
    assert _parse_level("unknown", default=logging.ERROR) == logging.ERROR  # nosec B101


def test_mask_secret():
    assert mask_secret("") == ""
    assert mask_secret("short") == "***"
    assert mask_secret("sk-abcdefghijklmnop") == "sk-…op"
    assert mask_secret("Bearer sk-abcdefghijklmnop") == "Bearer sk-…op"


def test_redact_headers_and_url():
    headers = redact_headers({"Authorization": "Bearer sk-abcdefghijklmnop", "x-api-key": "ant-0123456789", "Accept": "x"})
    assert headers == {"Authorization": "Bearer sk-…op", "x-api-key": "ant…89", "Accept": "x"}
    url = redact_url("https://g.example/v1beta/models/m:streamGenerateContent?alt=sse&key=AIzaSecretValue123")
    assert "AIzaSecretValue123" not in url
    assert "alt=sse" in url
    assert redact_url("https://api.openai.com/v1/models") == "https://api.openai.com/v1/models"


def test_normalized_log_event_emits_required_keys(chatgate_logs):
    logger = get_logger("chatgate.test.logging")
    normalized_log_event(
        logger,
        "chat.finalize",
        LogContext(provider="openai", model="gpt-4o", request_id="abc"),
        phase="finalize",
        attempt=1,
        emitted=True,
        tokens={"prompt": 3},
        finish_reason="stop",
    )
    data = json.loads(chatgate_logs[-1])
    for key in REQUIRED_NORMALIZED_KEYS:
        if key != "error_code":
            assert key in data
    assert "error_code" not in data
    assert data["event"] == "chat.finalize"
    assert data["provider"] == "openai" and data["request_id"] == "abc"
    assert data["tokens"] == {"prompt": 3}


def test_log_event_drops_none_fields(chatgate_logs):
    log_event(get_logger("chatgate.test.logging"), "models.fetch", None, source="builtin", count=None)
    assert json.loads(chatgate_logs[-1]) == {"event": "models.fetch", "source": "builtin"}


def test_json_formatter_hoists_json_messages():
    record = logging.LogRecord("chatgate.x", logging.INFO, __file__, 1, json.dumps({"event": "e", "n": 1}), None, None)
    data = json.loads(JsonFormatter().format(record))
    assert data["event"] == "e" and data["n"] == 1
    assert data["level"] == "INFO"


def test_configure_logger_adds_and_removes_file_handler(tmp_path):
    path = tmp_path / "logs" / "chatgate.log"
    logger = get_logger("chatgate")
    saved_level = logger.level
    saved_handlers = [(h, h.level) for h in logger.handlers]
    try:
        configure_logger(level="DEBUG", file_path=str(path))
        managed = [h for h in logger.handlers if getattr(h, "_chatgate_file_handler", False)]
        assert len(managed) == 1
        log_event(logger, "test.file", None, ok=True)
        managed[0].flush()
        assert '"test.file"' in path.read_text(encoding="utf-8")
        configure_logger(file_path=None)
        assert not any(getattr(h, "_chatgate_file_handler", False) for h in logger.handlers)
    finally:
        configure_logger(file_path=None)
        logger.setLevel(saved_level)
        for handler, level in saved_handlers:
            handler.setLevel(level)
