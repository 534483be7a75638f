"""
L1 Domain — Native command construction (pure).

Every command line the engine ever sends to the package tool is built
here, one formatting step per command kind. The rendered lines are part
of the external contract and must not drift:

    query candidate   rpm -qp --queryformat '%{NAME} %{VERSION}-%{RELEASE}\\n' <ref>
    query installed   rpm -q --queryformat '%{NAME} %{VERSION}-%{RELEASE}\\n' <name>
    install           rpm [options] -i <ref>
    upgrade           rpm [options] -U <ref>
    downgrade         rpm [options] -U --oldpackage <ref>
    remove            rpm [options] -e <name>-<version>

``options`` lands verbatim between the tool and the mode flag. With no
options the rendered line keeps its double space (``rpm  -i x.rpm``).
"""

from __future__ import annotations

import shlex

from pkgconverge.core.errors import MISSING_SOURCE, PackageError
from pkgconverge.core.models.command import Command
from pkgconverge.core.models.package import PackageAction, PackageSpec

DEFAULT_TOOL = "rpm"
DEFAULT_TIMEOUT = 900

QUERY_FORMAT = "%{NAME} %{VERSION}-%{RELEASE}\n"

_MODE_FLAGS: dict[str, list[str]] = {
    "install": ["-i"],
    "upgrade": ["-U"],
    "downgrade": ["-U", "--oldpackage"],
    "remove": ["-e"],
}


def query_candidate_command(
    artifact_ref: str,
    tool: str = DEFAULT_TOOL,
    timeout: int = DEFAULT_TIMEOUT,
) -> Command:
    """Query name and version-release from the artifact itself."""
    return Command(
        id="query-candidate",
        line=f"{tool} -qp --queryformat '{QUERY_FORMAT}' {artifact_ref}",
        argv=[tool, "-qp", "--queryformat", QUERY_FORMAT, artifact_ref],
        timeout=timeout,
    )


def query_installed_command(
    name: str,
    tool: str = DEFAULT_TOOL,
    timeout: int = DEFAULT_TIMEOUT,
) -> Command:
    """Query name and version-release from the installed database."""
    return Command(
        id="query-installed",
        line=f"{tool} -q --queryformat '{QUERY_FORMAT}' {name}",
        argv=[tool, "-q", "--queryformat", QUERY_FORMAT, name],
        timeout=timeout,
    )


def build_command(
    action: PackageAction,
    spec: PackageSpec,
    tool: str = DEFAULT_TOOL,
    timeout: int = DEFAULT_TIMEOUT,
) -> Command | None:
    """Render a planned action as a native command.

    Args:
        action: The planned action.
        spec: Desired state; supplies ``options``.
        tool: Package tool executable.
        timeout: Execution timeout in seconds.

    Returns:
        The mutating Command, or None for a noop.

    Raises:
        PackageError: ``missing_source`` for an install-side action
            without an artifact reference.
    """
    if action.is_noop:
        return None

    if action.kind == "remove":
        target = f"{action.name}-{action.version}"
    else:
        if not action.artifact_ref:
            raise PackageError(
                MISSING_SOURCE,
                f"Source for package {spec.name} is required for action {action.kind}",
            )
        target = action.artifact_ref

    flags = _MODE_FLAGS[action.kind]
    options = spec.options or ""

    return Command(
        id=action.kind,
        line=f"{tool} {options} {' '.join(flags)} {target}",
        argv=[tool, *shlex.split(options), *flags, target],
        timeout=timeout,
        mutating=True,
    )
