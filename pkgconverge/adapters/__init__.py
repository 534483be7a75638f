"""Runners — bindings to the native package tool.

Public re-exports for convenient access.
"""

from pkgconverge.adapters.base import CommandRunner, ExecutionContext
from pkgconverge.adapters.mock import MockCommandRunner
from pkgconverge.adapters.shell.command import ShellCommandAdapter

__all__ = [
    "CommandRunner",
    "ExecutionContext",
    "MockCommandRunner",
    "ShellCommandAdapter",
]
