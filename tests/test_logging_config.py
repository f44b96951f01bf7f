"""
Tests for logging_config: JSON/human formatters and setup_logging().
"""
import json
import logging
import os

import pytest

from logging_config import HumanFormatter, JSONFormatter, setup_logging


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(msg="Quote %s saved", args=("Q-1",), **extra):
    rec = logging.LogRecord("notes2quote.db", logging.INFO, __file__, 10, msg, args, None)
    for k, v in extra.items():
        setattr(rec, k, v)
    return rec


class TestFormatters:

    def test_json_line(self):
        entry = json.loads(JSONFormatter().format(_record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "notes2quote.db"
        assert entry["msg"] == "Quote Q-1 saved"

    def test_json_extra_fields(self):
        entry = json.loads(JSONFormatter().format(
            _record(quote_number="Q-1", total=36.0, colour="red")))
        assert entry["quote_number"] == "Q-1"
        assert entry["total"] == 36.0
        assert "colour" not in entry

    def test_json_request_fields(self):
        entry = json.loads(JSONFormatter().format(
            _record("GET /", (), route="/", method="GET", duration_ms=3.5)))
        assert (entry["route"], entry["method"], entry["duration_ms"]) == ("/", "GET", 3.5)
        assert set(entry) >= {"ts", "level", "logger", "msg"}

    def test_human(self):
        line = HumanFormatter().format(_record())
        assert "[I] notes2quote.db: Quote Q-1 saved" in line
        assert "\033[" not in line

    def test_human_tags_quote_number(self):
        line = HumanFormatter().format(_record("Rendered PDF", (), quote_number="Q-9"))
        assert line.endswith("Rendered PDF (Q-9)")

    def test_human_no_duplicate_tag(self):
        line = HumanFormatter().format(_record(quote_number="Q-1"))
        assert line.count("Q-1") == 1

    def test_human_color(self):
        line = HumanFormatter(color=True).format(_record())
        assert line.startswith("\033[32m")
        assert line.endswith(HumanFormatter.RESET)


class TestSetup:

    def test_handlers_and_file(self, restore_root, tmp_path):
        setup_logging(level="DEBUG", json_logs=True, log_dir=str(tmp_path))
        assert restore_root.level == logging.DEBUG
        assert isinstance(restore_root.handlers[0].formatter, JSONFormatter)
        logging.getLogger("notes2quote.test").info("hello")
        for h in restore_root.handlers:
            h.flush()
        assert os.path.exists(tmp_path / "notes2quote.log")

    def test_env_level(self, restore_root, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.setenv("N2Q_JSON_LOGS", "0")
        setup_logging(log_dir=str(tmp_path))
        assert restore_root.level == logging.WARNING
        assert isinstance(restore_root.handlers[0].formatter, HumanFormatter)
        assert logging.getLogger("PIL").level == logging.WARNING
