"""
Package models — desired state, probed state, and planned action.

Everything here is built fresh for one reconciliation pass and never
mutated afterwards. The installed state is a returned value, not a
field that later stages overwrite.
"""

from __future__ import annotations

import shlex
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

PackageOperation = Literal["install", "upgrade", "remove", "purge"]


class PackageSpec(BaseModel):
    """Desired state of one package, as declared by the caller.

    ``name`` may itself be a filesystem path to the artifact; in that
    case ``package_name`` (or the name read from the artifact) is what
    the installed database is queried for.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    source: str | None = None
    version: str | None = None
    options: str | None = None
    allow_downgrade: bool = False
    action: PackageOperation = "install"
    package_name: str | None = None

    @field_validator("options")
    @classmethod
    def validate_options(cls, value: str | None) -> str | None:
        """Options must split into arguments the way a shell would."""
        if value:
            try:
                shlex.split(value)
            except ValueError as e:
                raise ValueError(f"options {value!r} cannot be split into arguments: {e}") from e
        return value


class CandidateMetadata(BaseModel):
    """Name and version-release read from the artifact itself."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str


class InstalledState(BaseModel):
    """Presence of the package in the host's package database.

    ``query_failed`` means the tool gave no determinate answer. It is
    never interchangeable with ``absent``.
    """

    model_config = ConfigDict(frozen=True)

    status: Literal["absent", "present", "query_failed"]
    version: str | None = None
    detail: str = ""

    @classmethod
    def absent(cls, detail: str = "") -> InstalledState:
        return cls(status="absent", detail=detail)

    @classmethod
    def present(cls, version: str) -> InstalledState:
        return cls(status="present", version=version)

    @classmethod
    def query_failed(cls, detail: str = "") -> InstalledState:
        return cls(status="query_failed", detail=detail)

    @property
    def is_absent(self) -> bool:
        return self.status == "absent"

    @property
    def is_present(self) -> bool:
        return self.status == "present"

    @property
    def is_query_failed(self) -> bool:
        return self.status == "query_failed"


ActionKind = Literal["noop", "install", "upgrade", "downgrade", "remove"]


class PackageAction(BaseModel):
    """The single action a pass will perform.

    install/upgrade/downgrade carry ``artifact_ref``;
    remove carries ``name`` and ``version``.
    """

    model_config = ConfigDict(frozen=True)

    kind: ActionKind
    artifact_ref: str | None = None
    name: str | None = None
    version: str | None = None

    @classmethod
    def noop(cls) -> PackageAction:
        return cls(kind="noop")

    @classmethod
    def install(cls, artifact_ref: str) -> PackageAction:
        return cls(kind="install", artifact_ref=artifact_ref)

    @classmethod
    def upgrade(cls, artifact_ref: str) -> PackageAction:
        return cls(kind="upgrade", artifact_ref=artifact_ref)

    @classmethod
    def downgrade(cls, artifact_ref: str) -> PackageAction:
        return cls(kind="downgrade", artifact_ref=artifact_ref)

    @classmethod
    def remove(cls, name: str, version: str) -> PackageAction:
        return cls(kind="remove", name=name, version=version)

    @property
    def is_noop(self) -> bool:
        return self.kind == "noop"
