"""
Package prober — the two read-only native queries.

Turns raw receipts from the query commands into structured results. The
hard part is exit-code interpretation: the installed query must tell the
tool's own "no such package" answer apart from every other way the
query can go wrong, and must never fold the latter into "absent".
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from pkgconverge.adapters.base import CommandRunner
from pkgconverge.core.domain.commands import (
    DEFAULT_TIMEOUT,
    DEFAULT_TOOL,
    query_candidate_command,
    query_installed_command,
)
from pkgconverge.core.domain.version import version_key
from pkgconverge.core.models.command import Receipt
from pkgconverge.core.models.package import CandidateMetadata, InstalledState

logger = logging.getLogger(__name__)

_LINE_RE = re.compile(r"^(\S+)\s(\S+)$")


@dataclass(frozen=True)
class CandidateProbe:
    """Outcome of the artifact query.

    ``metadata`` is None when the artifact could not be read; ``failed``
    is set only when the tool never answered at all.
    """

    metadata: CandidateMetadata | None = None
    failed: bool = False
    detail: str = ""


@dataclass(frozen=True)
class ProbeResult:
    candidate: CandidateProbe
    installed: InstalledState
    installed_name: str


def parse_query_output(output: str) -> list[tuple[str, str]]:
    """Parse ``NAME VERSION-RELEASE`` lines, skipping anything else."""
    entries = []
    for line in output.splitlines():
        m = _LINE_RE.match(line.strip())
        if m:
            entries.append((m.group(1), m.group(2)))
    return entries


def _reports_not_installed(receipt: Receipt, name: str) -> bool:
    """Whether the tool said, in so many words, that ``name`` is not installed.

    rpm exits 1 both for a missing package and for database errors, so
    the exit code alone never decides it.
    """
    pattern = re.compile(rf"^package {re.escape(name)} is not installed$", re.MULTILINE)
    return bool(pattern.search(receipt.diagnostics))


def probe_candidate(
    runner: CommandRunner,
    artifact_ref: str,
    tool: str = DEFAULT_TOOL,
    timeout: int = DEFAULT_TIMEOUT,
) -> CandidateProbe:
    """Read name and version-release from the artifact."""
    receipt = runner.run(query_candidate_command(artifact_ref, tool=tool, timeout=timeout))

    if receipt.exit_code is None:
        logger.warning("Candidate query for %s failed: %s", artifact_ref, receipt.error)
        return CandidateProbe(failed=True, detail=receipt.diagnostics)

    if receipt.exit_code != 0:
        logger.debug("Candidate query for %s exited %d", artifact_ref, receipt.exit_code)
        return CandidateProbe(detail=receipt.diagnostics)

    entries = parse_query_output(receipt.output)
    if not entries:
        logger.debug("Candidate query for %s returned no metadata", artifact_ref)
        return CandidateProbe(detail=receipt.output)

    name, version = entries[0]
    logger.debug("Candidate %s is %s %s", artifact_ref, name, version)
    return CandidateProbe(metadata=CandidateMetadata(name=name, version=version))


def probe_installed(
    runner: CommandRunner,
    name: str,
    tool: str = DEFAULT_TOOL,
    timeout: int = DEFAULT_TIMEOUT,
) -> InstalledState:
    """Read the installed version-release of ``name``.

    Returns:
        ``present`` on exit 0 with a parseable line (the newest, if
        several versions are installed), ``absent`` on a non-zero exit
        whose output names ``name`` as not installed, ``query_failed``
        for everything else.
    """
    receipt = runner.run(query_installed_command(name, tool=tool, timeout=timeout))

    if receipt.exit_code is None:
        logger.warning("Installed query for %s failed: %s", name, receipt.error)
        return InstalledState.query_failed(receipt.diagnostics)

    if receipt.exit_code == 0:
        versions = [v for _, v in parse_query_output(receipt.output)]
        if not versions:
            logger.warning("Installed query for %s succeeded with unparseable output", name)
            return InstalledState.query_failed(receipt.output)
        return InstalledState.present(max(versions, key=version_key))

    if _reports_not_installed(receipt, name):
        logger.debug("%s is not installed", name)
        return InstalledState.absent(receipt.diagnostics)

    logger.warning("Installed query for %s exited %d", name, receipt.exit_code)
    return InstalledState.query_failed(receipt.diagnostics)


def probe(
    runner: CommandRunner,
    artifact_ref: str | None,
    name: str,
    tool: str = DEFAULT_TOOL,
    timeout: int = DEFAULT_TIMEOUT,
    path_name: bool = False,
) -> ProbeResult:
    """Run both queries.

    Args:
        runner: Command runner.
        artifact_ref: Artifact to read, or None to skip the artifact query.
        name: Package name to look up in the installed database.
        tool: Package tool executable.
        timeout: Per-query timeout in seconds.
        path_name: ``name`` is a path to the artifact; look up the name
            the artifact reports instead.
    """
    candidate = CandidateProbe()
    if artifact_ref:
        candidate = probe_candidate(runner, artifact_ref, tool=tool, timeout=timeout)

    installed_name = name
    if path_name and candidate.metadata is not None:
        installed_name = candidate.metadata.name

    installed = probe_installed(runner, installed_name, tool=tool, timeout=timeout)
    return ProbeResult(candidate=candidate, installed=installed, installed_name=installed_name)
