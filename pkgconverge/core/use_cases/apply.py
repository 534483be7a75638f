"""
Apply use case — reconcile every package declared in a manifest.

Packages are reconciled one after another, each in its own pass. A
failure in one pass is recorded and the next package still runs; no
state is shared between passes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from pkgconverge.adapters.base import CommandRunner
from pkgconverge.core.config.loader import ConfigError, find_manifest_file, load_manifest
from pkgconverge.core.use_cases.reconcile import ReconcileResult, reconcile_package

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """Result of applying a manifest."""

    manifest_path: Path | None = None
    results: list[ReconcileResult] = field(default_factory=list)
    error: str | None = None

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)

    @property
    def changed(self) -> int:
        return sum(1 for r in self.results if r.changed)

    @property
    def ok(self) -> bool:
        return self.error is None and self.failed == 0

    @property
    def status(self) -> str:
        if self.error or (self.failed and self.failed == self.total):
            return "failed"
        if self.failed:
            return "partial"
        return "ok"

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            return result

        result["manifest"] = str(self.manifest_path)
        result["status"] = self.status
        result["total"] = self.total
        result["changed"] = self.changed
        result["failed"] = self.failed
        result["packages"] = [r.to_dict() for r in self.results]
        return result


def apply_manifest(
    config_path: Path | None = None,
    runner: CommandRunner | None = None,
    dry_run: bool = False,
) -> ApplyResult:
    """Reconcile every package in packages.yml.

    Args:
        config_path: Optional explicit path to packages.yml.
        runner: Optional pre-configured runner (default: shell).
        dry_run: If True, plan but don't execute.

    Returns:
        ApplyResult with one ReconcileResult per package.
    """
    result = ApplyResult()

    try:
        if config_path is None:
            config_path = find_manifest_file()
        manifest = load_manifest(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    result.manifest_path = config_path
    settings = manifest.settings

    if runner is None:
        from pkgconverge.adapters.shell.command import ShellCommandAdapter

        runner = ShellCommandAdapter(tool=settings.tool)

    for spec in manifest.packages:
        outcome = reconcile_package(
            spec,
            runner=runner,
            tool=settings.tool,
            timeout=settings.timeout,
            dry_run=dry_run,
        )
        result.results.append(outcome)

        status_marker = "✓" if outcome.ok else "✗"
        logger.info(
            "%s %s:%s → %s",
            status_marker,
            spec.name,
            spec.action,
            outcome.action.kind if outcome.action else outcome.reason,
        )

    return result
