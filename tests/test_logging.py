"""Tests for logging configuration and secret redaction."""

import io
import json
import logging
import sys

import pytest

from check_gate.config import (
    ActionsFormatter,
    GateTextFormatter,
    JSONFormatter,
    SanitizingFilter,
    build_handler,
    configure_logging,
)
from check_gate.utils import redact_tokens, sanitize_log_message


def make_record(msg, args=(), level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="check_gate.poller",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestSanitizeLogMessage:
    """Credentials never reach log output."""

    @pytest.mark.parametrize(
        "token",
        [
            "ghp_" + "a" * 36,
            "ghs_" + "B1" * 18,
            "github_pat_" + "x" * 30,
        ],
    )
    def test_redacts_github_tokens(self, token):
        result = sanitize_log_message(f"using {token} for octo/repo")
        assert token not in result
        assert "[REDACTED]" in result
        assert "octo/repo" in result

    def test_redacts_authorization_header(self):
        result = sanitize_log_message("Authorization: Bearer abcdef123456")
        assert "abcdef123456" not in result
        assert result == "Authorization: Bearer [REDACTED]"

    def test_redacts_assignments(self):
        result = sanitize_log_message("retrying with token=s3cr3tvalue")
        assert result == "retrying with token=[REDACTED]"

    def test_leaves_plain_messages_alone(self):
        message = "Page 2 still running: build, lint"
        assert sanitize_log_message(message) == message


class TestRedactTokens:
    """Only token-shaped values are redacted from user-facing errors."""

    def test_redacts_github_token(self):
        token = "gho_" + "q" * 36
        assert redact_tokens(f"bad {token}") == "bad [REDACTED]"

    def test_keeps_check_names_that_look_like_assignments(self):
        message = "bearer deployment-smoke (failure), token=check (failure)"
        assert redact_tokens(message) == message


class TestSanitizingFilter:
    def test_renders_and_redacts_message(self):
        token = "ghp_" + "z" * 36
        record = make_record("token %s used for %d pages", (token, 3))

        assert SanitizingFilter().filter(record) is True
        assert record.args is None
        assert token not in record.getMessage()
        assert record.getMessage().endswith("used for 3 pages")


class TestGateTextFormatter:
    def test_appends_poll_context(self):
        record = make_record(
            "Page %d still running", (2,), page=2, pending=["build", "lint"]
        )

        line = GateTextFormatter().format(record)

        assert "INFO    check_gate.poller: Page 2 still running" in line
        assert line.endswith("[page=2 pending=build,lint]")

    def test_no_context_no_suffix(self):
        line = GateTextFormatter().format(make_record("Starting"))
        assert line.endswith("check_gate.poller: Starting")

    def test_empty_pending_renders_dash(self):
        line = GateTextFormatter().format(make_record("Done", pending=[]))
        assert line.endswith("[pending=-]")


class TestJSONFormatter:
    def test_formats_context_fields(self):
        record = make_record("Page %d settled", (2,), page=2, fetches=5)

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "Page 2 settled"
        assert data["level"] == "INFO"
        assert data["logger"] == "check_gate.poller"
        assert data["page"] == 2
        assert data["fetches"] == 5
        assert data["timestamp"].endswith("Z")
        assert "repository" not in data


class TestActionsFormatter:
    def test_warning_becomes_annotation(self):
        record = make_record("Timed out on page %d", (3,), level=logging.WARNING)
        assert ActionsFormatter().format(record) == "::warning::Timed out on page 3"

    def test_debug_becomes_debug_command(self):
        record = make_record("Fetching page 1", level=logging.DEBUG)
        assert ActionsFormatter().format(record) == "::debug::Fetching page 1"

    def test_info_is_plain(self):
        record = make_record("Page 1 settled")
        assert ActionsFormatter().format(record) == "Page 1 settled"

    def test_escapes_command_data(self):
        record = make_record("100% done\nnext", level=logging.ERROR)
        assert ActionsFormatter().format(record) == "::error::100%25 done%0Anext"


class TestBuildHandler:
    def test_actions_writes_to_stdout(self):
        handler = build_handler("actions")
        assert handler.stream is sys.stdout
        assert isinstance(handler.formatter, ActionsFormatter)

    def test_text_writes_to_stderr(self):
        handler = build_handler("TEXT")
        assert handler.stream is sys.stderr
        assert isinstance(handler.formatter, GateTextFormatter)

    def test_explicit_stream(self):
        stream = io.StringIO()
        handler = build_handler("json", stream=stream)
        handler.emit(make_record("hello", page=1))
        assert json.loads(stream.getvalue())["page"] == 1

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="log format must be one of"):
            build_handler("xml")


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers = handlers
        root.setLevel(level)

    def test_json_handler_with_filter(self):
        configure_logging(level="debug", format="json", sanitize_logs=True)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert isinstance(handler.formatter, JSONFormatter)
        assert any(isinstance(f, SanitizingFilter) for f in handler.filters)
        assert logging.getLogger("github").level == logging.WARNING

    def test_text_handler_without_filter(self):
        configure_logging(level="WARNING", format="text", sanitize_logs=False)

        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, GateTextFormatter)
        assert handler.filters == []

    def test_actions_handler(self):
        configure_logging(format="actions")

        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, ActionsFormatter)
