"""
Mock runner — scripted test double for native tool invocations.

Responses are keyed by the exact rendered command line, so a test that
scripts ``rpm -q --queryformat '...' foo`` fails loudly if the engine
ever sends anything else.
"""

from __future__ import annotations

from pkgconverge.adapters.base import CommandRunner, ExecutionContext
from pkgconverge.core.models.command import Receipt


class MockCommandRunner(CommandRunner):
    """Universal mock runner for testing.

    By default, unscripted commands succeed with empty output. With
    ``strict=True`` they fail instead, which is what most engine tests
    want.
    """

    def __init__(
        self,
        runner_name: str = "mock",
        available: bool = True,
        strict: bool = False,
    ):
        self._name = runner_name
        self._available = available
        self._strict = strict
        self._responses: dict[str, Receipt] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def commands(self) -> list[str]:
        """Rendered command lines, in call order."""
        return [ctx.command.line for ctx in self._call_log]

    @property
    def call_count(self) -> int:
        """Number of times execute has been called."""
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_response(self, command: str, exit_code: int = 0, output: str = "") -> None:
        """Script the result of one command line."""
        if exit_code == 0:
            receipt = Receipt.success(runner=self._name, command=command, output=output)
        else:
            receipt = Receipt.failure(
                runner=self._name,
                command=command,
                error=f"Command exited with code {exit_code}",
                output=output,
                exit_code=exit_code,
            )
        self._responses[command] = receipt

    def set_timeout(self, command: str, timeout: int = 900) -> None:
        """Script a command that never finishes within its timeout."""
        self._responses[command] = Receipt.failure(
            runner=self._name,
            command=command,
            error=f"Command timed out after {timeout}s",
            metadata={"timed_out": True, "timeout": timeout},
        )

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)
        line = context.command.line

        if line in self._responses:
            return self._responses[line].model_copy(deep=True)

        if self._strict:
            return Receipt.failure(
                runner=self._name,
                command=line,
                error=f"Unscripted command: {line}",
                metadata={"mock": True},
            )

        return Receipt.success(
            runner=self._name,
            command=line,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Clear call log and scripted responses."""
        self._call_log.clear()
        self._responses.clear()
