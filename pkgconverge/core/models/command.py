"""
Command and Receipt models — the execution contract.

Commands represent native tool invocations. Receipts represent results.
This is the fundamental I/O contract between the engine and runners:
the engine sends Commands, runners return Receipts. Never exceptions.
"""

from __future__ import annotations

import shlex
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Command(BaseModel):
    """A single native tool invocation.

    ``line`` is the canonical rendered form, kept byte-for-byte so that
    logs and test doubles see exactly what an operator would type.
    ``argv`` is what actually reaches ``subprocess.run``.
    """

    id: str = ""                    # short label, e.g. "query-installed"
    line: str                       # rendered command line
    argv: list[str] = Field(default_factory=list)
    timeout: int = 900              # seconds
    mutating: bool = False          # True only for install/upgrade/remove

    @classmethod
    def from_line(cls, line: str, **kwargs: Any) -> Command:
        """Build a command whose argv is the shell tokenization of ``line``."""
        return cls(line=line, argv=shlex.split(line), **kwargs)

    def __str__(self) -> str:
        return self.line


class Receipt(BaseModel):
    """Result of running a command.

    ``exit_code`` is None when the process never produced one
    (timeout, missing binary). Callers that need to tell "the tool
    answered no" apart from "the tool never answered" key on that.
    """

    runner: str
    command: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    exit_code: int | None = None
    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the command succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the command failed."""
        return self.status == "failed"

    @property
    def timed_out(self) -> bool:
        return bool(self.metadata.get("timed_out"))

    @property
    def diagnostics(self) -> str:
        """Everything the tool said, for operator-facing error messages."""
        parts = [p for p in (self.output, self.error) if p]
        return "\n".join(parts)

    @classmethod
    def success(
        cls,
        runner: str,
        command: str,
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        kwargs.setdefault("exit_code", 0)
        return cls(
            runner=runner,
            command=command,
            status="ok",
            output=output,
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        runner: str,
        command: str,
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(
            runner=runner,
            command=command,
            status="failed",
            error=error,
            **kwargs,
        )

    @classmethod
    def skip(
        cls,
        runner: str,
        command: str,
        reason: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a skip receipt."""
        return cls(
            runner=runner,
            command=command,
            status="skipped",
            output=reason,
            **kwargs,
        )
