"""Check gate utility modules."""

from check_gate.utils.validation import (
    escape_workflow_command,
    redact_tokens,
    sanitize_log_message,
)

__all__ = [
    "escape_workflow_command",
    "redact_tokens",
    "sanitize_log_message",
]
