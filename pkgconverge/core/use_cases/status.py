"""
Status use case — report a package's state without changing anything.

Runs the same classification and probes as a reconciliation pass and
stops before planning.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass

from pkgconverge.adapters.base import CommandRunner
from pkgconverge.core.domain.commands import DEFAULT_TIMEOUT, DEFAULT_TOOL
from pkgconverge.core.domain.source import classify_source, is_path_like
from pkgconverge.core.engine.prober import probe
from pkgconverge.core.errors import PackageError
from pkgconverge.core.models.package import CandidateMetadata, InstalledState

logger = logging.getLogger(__name__)


@dataclass
class StatusResult:
    """Probed state of one package."""

    name: str
    source_kind: str = ""
    installed_name: str = ""
    candidate: CandidateMetadata | None = None
    installed: InstalledState | None = None
    error: str | None = None
    reason: str | None = None

    def to_dict(self) -> dict:
        result: dict = {"name": self.name}
        if self.error:
            result["error"] = self.error
            result["reason"] = self.reason
            return result

        result["source_kind"] = self.source_kind
        result["installed_name"] = self.installed_name
        result["candidate"] = self.candidate.model_dump() if self.candidate else None
        result["installed"] = self.installed.model_dump() if self.installed else None
        return result


def get_package_status(
    name: str,
    source: str | None = None,
    package_name: str | None = None,
    runner: CommandRunner | None = None,
    tool: str = DEFAULT_TOOL,
    timeout: int = DEFAULT_TIMEOUT,
    exists: Callable[[str], bool] = os.path.exists,
) -> StatusResult:
    """Probe a package's candidate and installed state.

    Args:
        name: Declared package name (may be an artifact path).
        source: Optional artifact source.
        package_name: Name to query when ``name`` is a path.
        runner: Optional pre-configured runner (default: shell).
        tool: Package tool executable.
        timeout: Per-query timeout in seconds.
        exists: Filesystem existence check for local sources.

    Returns:
        StatusResult; ``error`` is set when classification fails.
    """
    if runner is None:
        from pkgconverge.adapters.shell.command import ShellCommandAdapter

        runner = ShellCommandAdapter(tool=tool)

    result = StatusResult(name=name)
    try:
        classified = classify_source(source, name, exists=exists)
    except PackageError as e:
        result.error = e.message
        result.reason = e.reason
        return result

    result.source_kind = classified.kind
    probed = probe(
        runner,
        classified.ref,
        package_name or name,
        tool=tool,
        timeout=timeout,
        path_name=package_name is None and not source and is_path_like(name),
    )
    result.installed_name = probed.installed_name
    result.candidate = probed.candidate.metadata
    result.installed = probed.installed
    return result
