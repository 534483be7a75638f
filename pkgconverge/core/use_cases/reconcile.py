"""
Reconcile use case — converge one package to its declared state.

This is the top-level orchestrator for a single pass:

    classify source → probe artifact + installed db → plan → build → execute

Exactly one action is planned and it is executed at most once. Any
failure ends the pass with a typed PackageError; ``reconcile_package``
turns that into a result object for callers that want data, not
exceptions.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field

from pkgconverge.adapters.base import CommandRunner
from pkgconverge.core.domain.commands import DEFAULT_TIMEOUT, DEFAULT_TOOL, build_command
from pkgconverge.core.domain.planner import plan_action, plan_removal
from pkgconverge.core.domain.source import classify_source, is_path_like
from pkgconverge.core.engine.executor import execute_command
from pkgconverge.core.engine.prober import probe
from pkgconverge.core.errors import (
    MISSING_SOURCE,
    UNABLE_TO_DETERMINE_VERSION,
    PackageError,
)
from pkgconverge.core.models.command import Receipt
from pkgconverge.core.models.package import (
    CandidateMetadata,
    InstalledState,
    PackageAction,
    PackageSpec,
)

logger = logging.getLogger(__name__)

REMOVE_OPERATIONS = frozenset({"remove", "purge"})


@dataclass
class ReconcileResult:
    """Result of one reconciliation pass."""

    spec: PackageSpec
    source_kind: str = ""
    artifact_ref: str | None = None
    installed_name: str = ""
    candidate: CandidateMetadata | None = None
    installed: InstalledState | None = None
    action: PackageAction | None = None
    command: str | None = None
    receipt: Receipt | None = None
    version: str | None = None          # effective installed version after the pass
    dry_run: bool = False
    error: str | None = None
    reason: str | None = None
    output: str = ""
    notes: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def changed(self) -> bool:
        return self.ok and self.action is not None and not self.action.is_noop

    def to_dict(self) -> dict:
        result: dict = {
            "name": self.spec.name,
            "operation": self.spec.action,
            "ok": self.ok,
        }
        if self.error:
            result["error"] = self.error
            result["reason"] = self.reason
            if self.output:
                result["output"] = self.output
            return result

        result["source_kind"] = self.source_kind
        result["artifact_ref"] = self.artifact_ref
        result["installed_name"] = self.installed_name
        result["candidate"] = self.candidate.model_dump() if self.candidate else None
        result["installed"] = self.installed.model_dump() if self.installed else None
        result["action"] = self.action.kind if self.action else None
        result["command"] = self.command
        result["changed"] = self.changed
        result["dry_run"] = self.dry_run
        result["version"] = self.version
        if self.receipt:
            result["receipt"] = self.receipt.model_dump(mode="json")
        if self.notes:
            result["notes"] = self.notes
        return result


def converge(
    spec: PackageSpec,
    runner: CommandRunner,
    tool: str = DEFAULT_TOOL,
    timeout: int = DEFAULT_TIMEOUT,
    dry_run: bool = False,
    exists: Callable[[str], bool] = os.path.exists,
    result: ReconcileResult | None = None,
) -> ReconcileResult:
    """Run one pass, raising on failure.

    Args:
        spec: Desired package state.
        runner: Command runner for every native invocation.
        tool: Package tool executable.
        timeout: Per-invocation timeout in seconds.
        dry_run: Plan and build, but don't execute the mutating command.
        exists: Filesystem existence check for local sources.
        result: Result object to fill in as stages complete.

    Returns:
        ReconcileResult describing the pass.

    Raises:
        PackageError: on any failure; see ``pkgconverge.core.errors``.
    """
    if result is None:
        result = ReconcileResult(spec=spec)
    result.dry_run = dry_run
    removing = spec.action in REMOVE_OPERATIONS

    # ── Classify source ──────────────────────────────────────────
    source = classify_source(spec.source, spec.name, exists=exists)
    result.source_kind = source.kind
    result.artifact_ref = source.ref

    if not removing and not source.has_artifact:
        raise PackageError(
            MISSING_SOURCE,
            f"Source for package {spec.name} is required for action {spec.action}",
        )

    # ── Probe ────────────────────────────────────────────────────
    path_name = spec.package_name is None and not spec.source and is_path_like(spec.name)
    probed = probe(
        runner,
        source.ref,
        spec.package_name or spec.name,
        tool=tool,
        timeout=timeout,
        path_name=path_name,
    )
    result.installed_name = probed.installed_name
    result.candidate = probed.candidate.metadata
    result.installed = probed.installed

    if probed.candidate.failed:
        raise PackageError(
            UNABLE_TO_DETERMINE_VERSION,
            f"Unable to read package metadata from {source.ref} due to a package-tool failure",
            output=probed.candidate.detail,
        )

    # ── Plan ─────────────────────────────────────────────────────
    desired: str | None = None
    if removing:
        action = plan_removal(probed.installed, probed.installed_name)
    else:
        # The artifact is what gets installed, so its version is the target.
        desired = spec.version
        candidate = probed.candidate.metadata
        if candidate is not None:
            if desired and desired != candidate.version:
                note = (
                    f"Declared version {desired} differs from artifact version "
                    f"{candidate.version}; the artifact is what gets installed"
                )
                logger.warning("%s: %s", spec.name, note)
                result.notes.append(note)
            desired = candidate.version
        action = plan_action(
            probed.installed,
            desired,
            spec.allow_downgrade,
            source.ref or spec.name,
        )
    result.action = action
    logger.info("%s: planned %s", spec.name, action.kind)

    # ── Build + execute ──────────────────────────────────────────
    command = build_command(action, spec, tool=tool, timeout=timeout)
    if command is None:
        result.version = probed.installed.version
        return result

    result.command = command.line
    result.receipt = execute_command(command, runner, dry_run=dry_run)

    if dry_run:
        result.version = probed.installed.version
    elif action.kind == "remove":
        result.version = None
    elif probed.candidate.metadata is not None:
        result.version = probed.candidate.metadata.version
    else:
        result.version = desired

    return result


def reconcile_package(
    spec: PackageSpec,
    runner: CommandRunner | None = None,
    tool: str = DEFAULT_TOOL,
    timeout: int = DEFAULT_TIMEOUT,
    dry_run: bool = False,
    exists: Callable[[str], bool] = os.path.exists,
) -> ReconcileResult:
    """Run one pass and capture any failure in the result.

    Args:
        spec: Desired package state.
        runner: Optional pre-configured runner (default: shell).
        tool: Package tool executable.
        timeout: Per-invocation timeout in seconds.
        dry_run: If True, plan but don't execute.
        exists: Filesystem existence check for local sources.

    Returns:
        ReconcileResult; ``error``/``reason`` are set on failure.
    """
    if runner is None:
        from pkgconverge.adapters.shell.command import ShellCommandAdapter

        runner = ShellCommandAdapter(tool=tool)

    result = ReconcileResult(spec=spec)
    try:
        converge(
            spec,
            runner,
            tool=tool,
            timeout=timeout,
            dry_run=dry_run,
            exists=exists,
            result=result,
        )
    except PackageError as e:
        logger.warning("%s: %s", spec.name, e.message)
        result.error = e.message
        result.reason = e.reason
        result.output = e.output

    return result
