"""Text sanitization helpers for logs and CI output."""

import re

_REDACTED = "[REDACTED]"

# GitHub token formats: classic/OAuth/user/server/refresh and fine-grained PATs
_GITHUB_TOKEN_PATTERN = re.compile(
    r"\b(?:gh[pousr]_[A-Za-z0-9]{20,}|github_pat_[A-Za-z0-9_]{20,})\b"
)
_AUTH_HEADER_PATTERN = re.compile(
    r"(?i)\b(authorization\s*[:=]\s*(?:bearer|token)|bearer)\s+[A-Za-z0-9._\-]{8,}"
)
_SECRET_ASSIGNMENT_PATTERN = re.compile(
    r"(?i)\b((?:github_)?(?:token|secret|password|api_key))(\s*[=:]\s*)(['\"]?)[^\s'\",]+\3"
)


def redact_tokens(message: str) -> str:
    """Replace GitHub token values, leaving all other text untouched."""
    return _GITHUB_TOKEN_PATTERN.sub(_REDACTED, message)


def sanitize_log_message(message: str) -> str:
    """Redact credentials from a log message.

    Handles raw GitHub tokens, ``Bearer``/``token`` authorization values and
    ``token=...`` style assignments.
    """
    message = redact_tokens(message)
    message = _AUTH_HEADER_PATTERN.sub(
        lambda m: f"{m.group(1)} {_REDACTED}", message
    )
    message = _SECRET_ASSIGNMENT_PATTERN.sub(
        lambda m: f"{m.group(1)}{m.group(2)}{_REDACTED}", message
    )
    return message


def escape_workflow_command(value: str) -> str:
    """Escape a message for a GitHub Actions ``::command::`` line."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
