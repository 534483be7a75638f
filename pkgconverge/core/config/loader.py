"""
Configuration loader — reads packages.yml into domain models.

This is the entry point for loading a package manifest. It reads YAML,
validates against Pydantic schemas, and returns typed domain objects.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from pkgconverge.core.domain.commands import DEFAULT_TIMEOUT, DEFAULT_TOOL
from pkgconverge.core.models.package import PackageSpec

logger = logging.getLogger(__name__)

# Default manifest filename
MANIFEST_FILE = "packages.yml"


class ConfigError(Exception):
    """Raised when the package manifest is invalid or missing."""


class Settings(BaseModel):
    """Settings shared by every package in a manifest."""

    tool: str = DEFAULT_TOOL
    timeout: int = Field(default=DEFAULT_TIMEOUT, gt=0)


class Manifest(BaseModel):
    """A declared set of packages, reconciled one at a time."""

    settings: Settings = Field(default_factory=Settings)
    packages: list[PackageSpec] = Field(default_factory=list)


def find_manifest_file(start_dir: Path | None = None) -> Path | None:
    """Search for packages.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to packages.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / MANIFEST_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_manifest(path: Path | None = None) -> Manifest:
    """Load and validate a package manifest.

    Args:
        path: Explicit path to packages.yml. If None, searches upward.

    Returns:
        Validated Manifest model.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_manifest_file()

    if path is None:
        raise ConfigError(f"No {MANIFEST_FILE} found. Specify one with --config.")

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading manifest from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        manifest = Manifest.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid package manifest: {e}") from e

    logger.info("Loaded %d packages from %s", len(manifest.packages), path)
    return manifest
