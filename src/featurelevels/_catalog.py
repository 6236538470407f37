"""Feature metadata: models, the provider protocol and a TOML-backed catalog."""

from __future__ import annotations

import logging
import tomllib
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ._errors import FeatureLevelsError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "0.0.0"
"""Version meaning "any version"; resolves to the highest available one."""


class CatalogError(FeatureLevelsError):
    """Error loading a feature catalog."""


class Dependency(BaseModel):
    """Reference from a feature to another feature by name and version."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str = DEFAULT_VERSION


class Feature(BaseModel):
    """A named, versioned feature hosted by a feature repository."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str = DEFAULT_VERSION
    repository: str = ""
    dependencies: tuple[Dependency, ...] = ()


class FeatureProvider(Protocol):
    """Source of feature metadata queried while building graphs."""

    def get_features(self, name: str, version: str | None) -> list[Feature]:
        """Return every feature matching name and version."""
        ...

    def get_feature(self, name: str, version: str | None) -> Feature | None:
        """Return the single best feature matching name and version, if any."""
        ...


def _is_any_version(version: str | None) -> bool:
    return version is None or version.strip() in ("", DEFAULT_VERSION)


def version_key(version: str) -> tuple[tuple[int, int | str], ...]:
    """Sort key ordering versions by their dot-separated components.

    Numeric components compare numerically and sort after textual ones, so
    ``1.2`` < ``1.10`` and ``1.0.alpha`` < ``1.0.0``.

    """
    parts: list[tuple[int, int | str]] = []
    for part in version.replace("-", ".").split("."):
        if part.isdigit():
            parts.append((1, int(part)))
        else:
            parts.append((0, part))
    return tuple(parts)


class FeatureCatalog(BaseModel):
    """An in-memory collection of features implementing :class:`FeatureProvider`."""

    model_config = ConfigDict(populate_by_name=True)

    features: list[Feature] = Field(default_factory=list, alias="feature")

    def get_features(self, name: str, version: str | None) -> list[Feature]:
        if _is_any_version(version):
            return [f for f in self.features if f.name == name]
        return [f for f in self.features if f.name == name and f.version == version]

    def get_feature(self, name: str, version: str | None) -> Feature | None:
        candidates = self.get_features(name, version)
        if not candidates:
            return None
        return max(candidates, key=lambda f: version_key(f.version))


def load_catalog(path: Path) -> FeatureCatalog:
    """Load a feature catalog from a TOML file.

    The file holds an array of ``[[feature]]`` tables, each with ``name``,
    ``version``, ``repository`` and ``dependencies`` (an array of
    ``{ name, version }`` tables).

    Args:
        path: Path to the catalog file.

    Returns:
        The validated catalog.

    Raises:
        CatalogError: If the file is missing, is not valid TOML, or does not
            match the catalog schema.

    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as e:
        msg = f"Feature catalog not found: {path}"
        raise CatalogError(msg) from e
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise CatalogError(msg) from e

    try:
        catalog = FeatureCatalog.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid feature catalog {path}: {e}"
        raise CatalogError(msg) from e

    logger.debug(f"Loaded {len(catalog.features)} features from {path}")
    return catalog
