from __future__ import annotations

import json
import logging

from app.core.logging import build_formatter, configure_logging


def _record(**extra) -> logging.LogRecord:
    return logging.makeLogRecord(
        {"name": "app.ocr.engines", "levelno": logging.INFO, "levelname": "INFO", "msg": "ocr_complete", **extra}
    )


def test_json_formatter_lifts_extra_fields() -> None:
    output = json.loads(build_formatter(json_logs=True).format(_record(provider="openrouter", chars=12)))
    assert output["event"] == "ocr_complete"
    assert output["level"] == "info"
    assert output["logger"] == "app.ocr.engines"
    assert output["provider"] == "openrouter"
    assert output["chars"] == 12
    assert "timestamp" in output


def test_key_value_formatter() -> None:
    output = build_formatter().format(_record(provider="openrouter"))
    assert "event='ocr_complete'" in output
    assert "provider='openrouter'" in output
    assert "_record" not in output


def test_configure_logging_is_idempotent() -> None:
    configure_logging("DEBUG")
    configure_logging("INFO", json_logs=True)
    root = logging.getLogger()
    ours = [h for h in root.handlers if getattr(h, "_app_handler", False)]
    assert len(ours) == 1
    assert root.level == logging.INFO
