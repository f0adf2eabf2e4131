"""Configuration module for the check gate."""

from .settings import Settings, parse_conclusions
from .logging import (
    LOG_FORMATS,
    ActionsFormatter,
    GateTextFormatter,
    JSONFormatter,
    SanitizingFilter,
    build_handler,
    configure_logging,
)

__all__ = [
    "Settings",
    "parse_conclusions",
    "LOG_FORMATS",
    "ActionsFormatter",
    "GateTextFormatter",
    "JSONFormatter",
    "SanitizingFilter",
    "build_handler",
    "configure_logging",
]
