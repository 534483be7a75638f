"""
L1 Domain — Source classification (pure).

Decides what kind of artifact reference a declared source is. The only
I/O is an existence check for local paths, and that is injectable.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel

from pkgconverge.core.errors import (
    SOURCE_NOT_FOUND,
    UNSUPPORTED_SOURCE_SCHEME,
    PackageError,
)

logger = logging.getLogger(__name__)

# Schemes the native tool (or a fetch step ahead of it) can handle.
NETWORK_SCHEMES = frozenset({"http", "https", "ftp"})
FILE_SCHEME = "file"

ARTIFACT_EXTENSIONS = (".rpm",)

_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*)://")

SourceKind = Literal["none", "local_path", "uri", "bare_name"]


class ClassifiedSource(BaseModel):
    """A source reference after classification.

    ``ref`` is the artifact reference native commands should use;
    it is None only for kind ``none``.
    """

    kind: SourceKind
    ref: str | None = None
    scheme: str | None = None

    @property
    def has_artifact(self) -> bool:
        return self.kind != "none"


def is_path_like(value: str) -> bool:
    """Whether a string names a file rather than a package."""
    return os.sep in value or "/" in value or value.endswith(ARTIFACT_EXTENSIONS)


def uri_scheme(value: str) -> str | None:
    """Return the lower-cased URI scheme of ``value``, if it has one."""
    m = _SCHEME_RE.match(value)
    return m.group(1).lower() if m else None


def classify_source(
    source: str | None,
    name: str,
    exists: Callable[[str], bool] = os.path.exists,
) -> ClassifiedSource:
    """Classify a declared source.

    Args:
        source: Declared source, or None.
        name: Declared package name; used as the artifact when it is
            itself a path and no source is given.
        exists: Filesystem existence check.

    Returns:
        ClassifiedSource.

    Raises:
        PackageError: ``unsupported_source_scheme`` for an unknown URI
            scheme, ``source_not_found`` for a missing local path.
    """
    if not source:
        if is_path_like(name):
            return _local(name, exists)
        return ClassifiedSource(kind="none")

    scheme = uri_scheme(source)
    if scheme is not None:
        if scheme in NETWORK_SCHEMES or scheme == FILE_SCHEME:
            logger.debug("Source %s accepted as %s URI", source, scheme)
            return ClassifiedSource(kind="uri", ref=source, scheme=scheme)
        raise PackageError(
            UNSUPPORTED_SOURCE_SCHEME,
            f"Package source {source} has an unsupported URI scheme '{scheme}'. "
            f"Supported: {', '.join(sorted(NETWORK_SCHEMES | {FILE_SCHEME}))}",
        )

    if is_path_like(source):
        return _local(source, exists)

    if exists(source):
        return ClassifiedSource(kind="local_path", ref=source)

    # A bare word: the native tool resolves it on its own terms.
    return ClassifiedSource(kind="bare_name", ref=source)


def _local(path: str, exists: Callable[[str], bool]) -> ClassifiedSource:
    if not exists(path):
        raise PackageError(
            SOURCE_NOT_FOUND,
            f"Package source {path} not found",
        )
    return ClassifiedSource(kind="local_path", ref=path)
