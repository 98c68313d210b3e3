# =============================================================================
# tests/test_logging.py - ログフォーマッターと初期化
# =============================================================================

import io
import json
import logging
import sys

import pytest

from contenthub.core.logging import JSONFormatter, TextFormatter, setup_logging


def _record(msg="回答提出", exc_info=None, **extra):
    record = logging.LogRecord("contenthub.test", logging.INFO, __file__, 1, msg, None, exc_info)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJSONFormatter:
    def test_service_env_and_context(self):
        line = JSONFormatter(service="contenthub", env="test").format(
            _record(user_id=3, wenjuan_id=7)
        )
        entry = json.loads(line)

        assert entry["service"] == "contenthub"
        assert entry["env"] == "test"
        assert entry["msg"] == "回答提出"
        assert entry["user_id"] == 3
        assert entry["wenjuan_id"] == 7
        assert "path" not in entry

    def test_exception_is_included(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record(msg="失敗", exc_info=sys.exc_info())

        entry = json.loads(JSONFormatter(service="s", env="e").format(record))
        assert "ValueError: boom" in entry["exc"]


class TestTextFormatter:
    def test_context_is_appended(self):
        line = TextFormatter().format(_record(path="/blog"))

        assert "回答提出" in line
        assert line.endswith("path=/blog")


class TestSetupLogging:
    def test_writes_json_to_stream(self, restore_root):
        buf = io.StringIO()
        setup_logging(debug=False, log_format="json", service="contenthub", env="test", stream=buf)

        logging.getLogger("contenthub.x").info("起動", extra={"user_id": 1})
        entry = json.loads(buf.getvalue().strip())
        assert entry["msg"] == "起動"
        assert entry["user_id"] == 1
        assert logging.getLogger("fpdf").level == logging.WARNING

    def test_debug_level(self, restore_root):
        setup_logging(debug=True, log_format="text", stream=io.StringIO())

        assert logging.getLogger().level == logging.DEBUG
