"""
L1 Domain — Action planning (pure).

Maps (installed state, desired version, downgrade permission) to exactly
one PackageAction. No I/O, no subprocess.
"""

from __future__ import annotations

import logging

from pkgconverge.core.domain.version import (
    EQUAL,
    GREATER,
    compare_versions,
    has_release,
    strip_release,
)
from pkgconverge.core.errors import (
    DOWNGRADE_NOT_ALLOWED,
    UNABLE_TO_DETERMINE_VERSION,
    PackageError,
)
from pkgconverge.core.models.package import InstalledState, PackageAction

logger = logging.getLogger(__name__)

QUERY_FAILED_MESSAGE = "Unable to determine current version due to a package-tool failure"


def _require_determinate(installed: InstalledState) -> None:
    if installed.is_query_failed:
        raise PackageError(
            UNABLE_TO_DETERMINE_VERSION,
            QUERY_FAILED_MESSAGE,
            output=installed.detail,
        )


def plan_action(
    installed: InstalledState,
    desired_version: str | None,
    allow_downgrade: bool,
    artifact_ref: str,
) -> PackageAction:
    """Plan the install-side action for one pass.

    Args:
        installed: Probed installed state.
        desired_version: Version-release to converge to; None means any
            installed version satisfies the declaration.
        allow_downgrade: Whether an older desired version may replace a
            newer installed one.
        artifact_ref: Artifact the install/upgrade command should use.

    Returns:
        PackageAction of kind noop, install, upgrade or downgrade.

    Raises:
        PackageError: ``unable_to_determine_version`` when the installed
            state is indeterminate, ``downgrade_not_allowed`` when the
            desired version is older and downgrades are not permitted.
    """
    _require_determinate(installed)

    if installed.is_absent:
        return PackageAction.install(artifact_ref)

    current = installed.version or ""
    if not desired_version:
        logger.debug("No desired version; installed %s satisfies", current)
        return PackageAction.noop()

    # A desired version without a release matches any release of it.
    compared_to = current if has_release(desired_version) else strip_release(current)
    order = compare_versions(desired_version, compared_to)

    if order == EQUAL:
        return PackageAction.noop()
    if order == GREATER:
        return PackageAction.upgrade(artifact_ref)
    if allow_downgrade:
        return PackageAction.downgrade(artifact_ref)

    raise PackageError(
        DOWNGRADE_NOT_ALLOWED,
        f"Desired version {desired_version} is older than installed version "
        f"{current}; set allow_downgrade to permit the downgrade",
    )


def plan_removal(installed: InstalledState, name: str) -> PackageAction:
    """Plan a remove/purge: remove if present, noop if already absent."""
    _require_determinate(installed)

    if installed.is_absent:
        return PackageAction.noop()
    return PackageAction.remove(name, installed.version or "")
