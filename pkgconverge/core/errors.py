"""
Package errors — the single failure category of a reconciliation pass.

Every way a pass can fail surfaces as ``PackageError`` with a
distinguishing ``reason``. Native tool output, when there is any,
rides along verbatim in ``output`` so operators never have to re-run
the tool by hand to see what it said.
"""

from __future__ import annotations

SOURCE_NOT_FOUND = "source_not_found"
UNSUPPORTED_SOURCE_SCHEME = "unsupported_source_scheme"
MISSING_SOURCE = "missing_source"
UNABLE_TO_DETERMINE_VERSION = "unable_to_determine_version"
DOWNGRADE_NOT_ALLOWED = "downgrade_not_allowed"
EXEC_ERROR = "exec_error"

REASONS = frozenset({
    SOURCE_NOT_FOUND,
    UNSUPPORTED_SOURCE_SCHEME,
    MISSING_SOURCE,
    UNABLE_TO_DETERMINE_VERSION,
    DOWNGRADE_NOT_ALLOWED,
    EXEC_ERROR,
})


class PackageError(Exception):
    """Raised when a package operation cannot be completed."""

    def __init__(self, reason: str, message: str, output: str = ""):
        if reason not in REASONS:
            raise ValueError(f"Unknown package error reason: {reason!r}")
        self.reason = reason
        self.message = message
        self.output = output
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.output:
            return f"{self.message}\n{self.output}"
        return self.message

    def to_dict(self) -> dict:
        return {
            "reason": self.reason,
            "message": self.message,
            "output": self.output,
        }
