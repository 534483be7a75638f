"""
Engine executor — the single mutating step of a pass.

Runs the built command through the runner and turns a failed receipt
into a typed error. Everything before this point is read-only.
"""

from __future__ import annotations

import logging

from pkgconverge.adapters.base import CommandRunner
from pkgconverge.core.errors import EXEC_ERROR, PackageError
from pkgconverge.core.models.command import Command, Receipt

logger = logging.getLogger(__name__)


def execute_command(
    command: Command,
    runner: CommandRunner,
    dry_run: bool = False,
) -> Receipt:
    """Execute a mutating command exactly once.

    Args:
        command: The command to run.
        runner: Command runner.
        dry_run: If True, validate but don't execute.

    Returns:
        The receipt of a successful (or skipped) run.

    Raises:
        PackageError: ``exec_error`` carrying the tool's captured output
            when the command fails or times out.
    """
    logger.info("Running: %s", command.line)
    receipt = runner.run(command, dry_run=dry_run)

    if receipt.failed:
        status = "timed out" if receipt.timed_out else "failed"
        if receipt.exit_code is not None:
            status = f"failed with exit code {receipt.exit_code}"
        logger.warning("%s %s", command.line, status)
        raise PackageError(
            EXEC_ERROR,
            f"Command {status}: {command.line}",
            output=receipt.diagnostics,
        )

    marker = "⊘" if receipt.status == "skipped" else "✓"
    logger.info("%s %s (%dms)", marker, command.line, receipt.duration_ms)
    return receipt
