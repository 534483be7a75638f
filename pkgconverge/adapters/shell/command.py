"""
Shell command runner — execute native package tool commands.

This is the process-execution collaborator: it runs a command,
captures its output, and enforces the timeout. No shell is involved;
the command's argv goes straight to ``subprocess.run``.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time

from pkgconverge.adapters.base import CommandRunner, ExecutionContext
from pkgconverge.core.models.command import Receipt

logger = logging.getLogger(__name__)


class ShellCommandAdapter(CommandRunner):
    """Execute commands with ``subprocess.run`` and capture output.

    Args:
        tool: The executable whose presence ``is_available`` checks.
    """

    def __init__(self, tool: str = "rpm"):
        self._tool = tool

    @property
    def name(self) -> str:
        return "shell"

    @property
    def tool(self) -> str:
        return self._tool

    def is_available(self) -> bool:
        return shutil.which(self._tool) is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        if not context.command.argv:
            return False, "Missing command arguments"
        if context.timeout <= 0:
            return False, f"Invalid timeout: {context.timeout}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        command = context.command
        logger.debug("Executing: %s (timeout=%ss)", command.line, command.timeout)
        start = time.monotonic()

        try:
            result = subprocess.run(
                command.argv,
                capture_output=True,
                text=True,
                timeout=command.timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                runner=self.name,
                command=command.line,
                error=f"Command timed out after {command.timeout}s",
                metadata={"timed_out": True, "timeout": command.timeout},
            )
        except FileNotFoundError:
            return Receipt.failure(
                runner=self.name,
                command=command.line,
                error=f"Command not found: {command.argv[0]}",
            )
        except OSError as e:
            return Receipt.failure(
                runner=self.name,
                command=command.line,
                error=f"Command execution error: {e}",
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        output = result.stdout.strip()
        stderr = result.stderr.strip()

        if result.returncode == 0:
            return Receipt.success(
                runner=self.name,
                command=command.line,
                output=output,
                exit_code=0,
                duration_ms=elapsed_ms,
                metadata={"stderr": stderr},
            )

        return Receipt.failure(
            runner=self.name,
            command=command.line,
            error=stderr or f"Command exited with code {result.returncode}",
            output=output,
            exit_code=result.returncode,
            duration_ms=elapsed_ms,
        )
