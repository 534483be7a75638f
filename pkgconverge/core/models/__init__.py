"""
Domain models — Pydantic types for package reconciliation.

All models are re-exported here for convenient access:

    from pkgconverge.core.models import PackageSpec, InstalledState, Command, Receipt
"""

from pkgconverge.core.models.command import Command, Receipt
from pkgconverge.core.models.package import (
    ActionKind,
    CandidateMetadata,
    InstalledState,
    PackageAction,
    PackageOperation,
    PackageSpec,
)

__all__ = [
    # package.py
    "ActionKind",
    "CandidateMetadata",
    # command.py
    "Command",
    "InstalledState",
    "PackageAction",
    "PackageOperation",
    "PackageSpec",
    "Receipt",
]
