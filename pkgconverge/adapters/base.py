"""
Runner base — the protocol contract between engine and the native tool.

This defines the abstract interface every command runner must implement.
The engine only talks to the package tool through this protocol, never
by calling subprocess directly.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod

from pydantic import BaseModel

from pkgconverge.core.models.command import Command, Receipt

logger = logging.getLogger(__name__)


class ExecutionContext(BaseModel):
    """Everything a runner needs to execute a command."""

    command: Command
    dry_run: bool = False

    @property
    def timeout(self) -> int:
        return self.command.timeout


class CommandRunner(ABC):
    """Abstract base class for command runners.

    Runners perform external side effects and return receipts.
    They NEVER raise exceptions — failures are captured in the Receipt.

    To create a new runner:
        1. Subclass CommandRunner
        2. Implement name, is_available, validate, execute
        3. Pass it to the reconcile use case
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The runner identifier (e.g., 'shell', 'mock')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the underlying tool can be invoked at all.

        Should be fast and never raise.
        """

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Validate that the command can be executed.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Execute the command and return a receipt.

        MUST never raise exceptions. All failures are captured
        in the Receipt with status='failed'.
        """

    def run(self, command: Command, dry_run: bool = False) -> Receipt:
        """Validate, then execute (or dry-run) a command.

        This is the main dispatch method:
        1. Builds the execution context
        2. Validates the command
        3. Executes (or skips for dry-run)
        4. Returns a Receipt (never raises)
        """
        start_time = time.monotonic()
        context = ExecutionContext(command=command, dry_run=dry_run)

        try:
            is_valid, error_msg = self.validate(context)
            if not is_valid:
                return Receipt.failure(
                    runner=self.name,
                    command=command.line,
                    error=f"Validation failed: {error_msg}",
                )
        except Exception as e:
            return Receipt.failure(
                runner=self.name,
                command=command.line,
                error=f"Validation error: {e}",
            )

        if dry_run:
            return Receipt.skip(
                runner=self.name,
                command=command.line,
                reason=f"[dry-run] Would execute: {command.line}",
                metadata={"dry_run": True},
            )

        try:
            receipt = self.execute(context)
        except Exception as e:
            logger.error("Runner %s raised during execution: %s", self.name, e)
            receipt = Receipt.failure(
                runner=self.name,
                command=command.line,
                error=f"Unexpected error: {e}",
            )

        receipt.duration_ms = int((time.monotonic() - start_time) * 1000)
        return receipt

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
