"""Tests for logging helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from assistant_migration.utils.logging import (
    configure_logging,
    get_logger,
    sanitize_payload,
    should_log_payloads,
    truncate_payload,
)


def test_sanitize_payload_redacts_nested_secrets() -> None:
    payload = {
        "name": "Alpha",
        "service_api": {"password": "k3y", "url": "https://x"},
        "webhooks": [{"headers": {"Authorization": "Bearer t"}}],
    }

    sanitized = sanitize_payload(payload)

    assert sanitized["name"] == "Alpha"
    assert sanitized["service_api"] == {"password": "[REDACTED]", "url": "https://x"}
    assert sanitized["webhooks"][0]["headers"]["Authorization"] == "[REDACTED]"
    assert payload["service_api"]["password"] == "k3y"


def test_truncate_payload() -> None:
    text = truncate_payload({"text": "x" * 500}, max_size=100)

    assert text.startswith("{")
    assert "[TRUNCATED" in text


def test_payload_logging_needs_flag() -> None:
    assert should_log_payloads(False) is False


def test_file_logging_writes_json_lines(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "migration.log"
    configure_logging(level="ERROR", log_file=str(log_file), file_level="INFO")

    get_logger("tests.logging").info("workspace_updated", target_id="T1")
    for handler in logging.getLogger().handlers:
        handler.flush()

    entries = [json.loads(line) for line in log_file.read_text().splitlines()]
    assert any("workspace_updated" in entry["event"] for entry in entries)
    assert all(entry["app"] == "assistant-bridge" for entry in entries)
