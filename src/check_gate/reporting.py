"""Report a failed gate to the CI host.

GitHub Actions reads workflow commands such as ``::error::`` from the job's
stdout and turns them into annotations on the run. Success has no report of
its own: the gate simply exits 0.
"""

import logging

import typer

from check_gate.utils.validation import escape_workflow_command, redact_tokens

logger = logging.getLogger(__name__)


def format_failure(message: str) -> str:
    """Render ``message`` as an ``::error::`` workflow command.

    The message is kept verbatim apart from token-shaped values.
    """
    return f"::error::{escape_workflow_command(redact_tokens(message))}"


def report_failure(message: str) -> None:
    """Mark the run as failed with ``message``.

    The caller is responsible for exiting non-zero afterwards.
    """
    logger.debug("Reporting gate failure: %s", message)
    typer.echo(format_failure(message))
