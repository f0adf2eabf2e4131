"""Log output for gate runs.

Three formats are supported:

- ``text``: one human-readable line per record, with the poll context
  (page, fetch count, pending checks) appended when a record carries it
- ``json``: one JSON object per record for log shippers
- ``actions``: GitHub Actions workflow commands, so warnings and errors
  show up as annotations on the run and debug lines only appear when step
  debugging is enabled

Text and JSON go to stderr; stdout is reserved for the gate's own
``::error::`` report. The ``actions`` format writes to stdout, which is
where the runner looks for workflow commands.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from check_gate.utils.validation import escape_workflow_command, sanitize_log_message

LOG_FORMATS = ("text", "json", "actions")

# Record attributes a poll log call may attach via ``extra=``
CONTEXT_FIELDS = ("repository", "ref", "page", "fetches", "pending", "elapsed_seconds")

_ACTIONS_COMMANDS = {
    logging.DEBUG: "debug",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Poll context attached to ``record``, in ``CONTEXT_FIELDS`` order."""
    return {
        name: getattr(record, name) for name in CONTEXT_FIELDS if hasattr(record, name)
    }


class SanitizingFilter(logging.Filter):
    """Redacts tokens from the rendered message.

    The message is rendered once and args are dropped, so every formatter
    downstream sees the redacted text.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = sanitize_log_message(record.getMessage())
        record.args = None
        return True


class GateTextFormatter(logging.Formatter):
    """``time level logger: message [page=2 fetches=5 pending=build,lint]``."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if context:
            line += " [" + " ".join(
                f"{name}={_render(value)}" for name, value in context.items()
            ) + "]"
        return line


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **record_context(record),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


class ActionsFormatter(logging.Formatter):
    """Renders records as GitHub Actions workflow commands.

    INFO records are printed as plain log lines; other levels map to
    ``::debug::``, ``::warning::`` and ``::error::``.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        command = _ACTIONS_COMMANDS.get(record.levelno)
        if command is None:
            return message
        return f"::{command}::{escape_workflow_command(message)}"


def _render(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value) or "-"
    return str(value)


def build_handler(format: str = "text", stream: Optional[Any] = None) -> logging.Handler:
    """Create a stream handler for one of ``LOG_FORMATS``."""
    format = format.lower()
    if format not in LOG_FORMATS:
        raise ValueError(f"log format must be one of {', '.join(LOG_FORMATS)}")

    if format == "actions":
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(ActionsFormatter())
    else:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(JSONFormatter() if format == "json" else GateTextFormatter())
    return handler


def configure_logging(
    level: str = "INFO", format: str = "text", sanitize_logs: bool = True
) -> None:
    """Route all logging through a single gate handler.

    Args:
        level: Log level name
        format: One of ``LOG_FORMATS``
        sanitize_logs: Redact tokens before records are formatted
    """
    handler = build_handler(format)
    if sanitize_logs:
        handler.addFilter(SanitizingFilter())

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # PyGithub and its transport log every request at DEBUG
    for name in ("github", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)
