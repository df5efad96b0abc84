"""
Dependency manifest lookup.

Reads the [project] table of pyproject.toml to learn the declared version and
runtime dependencies. When the file is not available (e.g. a non-editable
install), falls back to the installed distribution's metadata.
"""

import logging
import tomllib
from importlib import metadata
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DISTRIBUTION_NAME = "socket-security-demo"


class ManifestError(Exception):
    pass


class Manifest(BaseModel):
    name: str
    version: str
    dependencies: list[str] = Field(default_factory=list)

    @property
    def dependency_count(self) -> int:
        return len(self.dependencies)


def load_manifest(path: Path) -> Manifest:
    """Parse a pyproject.toml. Raises ManifestError if it has no usable [project] table."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ManifestError(f"{path} is not valid TOML: {exc}") from exc

    project = data.get("project")
    if not isinstance(project, dict) or "name" not in project:
        raise ManifestError(f"{path} has no [project] table")

    return Manifest(
        name=project["name"],
        version=str(project.get("version", "0.0.0")),
        dependencies=list(project.get("dependencies", [])),
    )


def installed_manifest(distribution: str = DISTRIBUTION_NAME) -> Manifest:
    """Build a Manifest from installed package metadata; runtime requirements only."""
    try:
        version = metadata.version(distribution)
    except metadata.PackageNotFoundError as exc:
        raise ManifestError(f"{distribution} is not installed") from exc

    requirements = metadata.requires(distribution) or []
    runtime = [req for req in requirements if "extra ==" not in req]
    return Manifest(name=distribution, version=version, dependencies=runtime)


def resolve_manifest(path: Path) -> Manifest:
    if path.is_file():
        return load_manifest(path)
    logger.warning("Manifest %s not found, reading installed metadata instead", path)
    return installed_manifest()
