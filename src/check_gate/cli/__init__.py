"""Command line interface for the check gate."""

from .main import app

__all__ = ["app"]
