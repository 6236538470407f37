"""Configuration loading from pyproject.toml."""

import re
import tomllib
from dataclasses import dataclass
from pathlib import Path

from featurelevels._errors import FeatureLevelsError
from featurelevels._graph import OnCycle


class ConfigError(FeatureLevelsError):
    """Error in featurelevels configuration."""


@dataclass(slots=True, frozen=True)
class FeatureLevelsConfig:
    """Configuration loaded from pyproject.toml.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    catalog: Path | None = None
    exclude: str | None = None
    node_pattern: str | None = None
    on_cycle: OnCycle = OnCycle.ABORT
    compact_repositories: bool = True
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _parse_pattern(section: dict[str, object], key: str) -> str | None:
    if key not in section:
        return None
    value = section[key]
    if not isinstance(value, str):
        msg = f"Invalid [tool.featurelevels].{key}: expected string pattern"
        raise ConfigError(msg)
    try:
        re.compile(value)
    except re.error as e:
        msg = f"Invalid [tool.featurelevels].{key}: {e}"
        raise ConfigError(msg) from e
    return value


def _parse_on_cycle(section: dict[str, object]) -> OnCycle:
    value = section.get("on-cycle", OnCycle.ABORT.value)
    try:
        return OnCycle(value)
    except ValueError as e:
        choices = ", ".join(f"'{policy.value}'" for policy in OnCycle)
        msg = f"Invalid [tool.featurelevels].on-cycle '{value}': expected one of {choices}"
        raise ConfigError(msg) from e


def load_config(pyproject_path: Path) -> FeatureLevelsConfig:
    """Load and validate [tool.featurelevels] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed FeatureLevelsConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    # Extract [tool.featurelevels] section
    tool_section = data.get("tool", {})
    section = tool_section.get("featurelevels", {})

    if not section:
        # No [tool.featurelevels] section - return empty config
        return FeatureLevelsConfig(project_root=project_root)

    # Parse catalog path
    catalog_path: Path | None = None
    if "catalog" in section:
        catalog_value = section["catalog"]
        if not isinstance(catalog_value, str):
            msg = "Invalid [tool.featurelevels].catalog: expected string path"
            raise ConfigError(msg)
        catalog_path = Path(catalog_value)
        if not catalog_path.is_absolute():
            catalog_path = project_root / catalog_path

    compact = section.get("compact-repositories", True)
    if not isinstance(compact, bool):
        msg = "Invalid [tool.featurelevels].compact-repositories: expected boolean"
        raise ConfigError(msg)

    return FeatureLevelsConfig(
        catalog=catalog_path,
        exclude=_parse_pattern(section, "exclude"),
        node_pattern=_parse_pattern(section, "node-pattern"),
        on_cycle=_parse_on_cycle(section),
        compact_repositories=compact,
        project_root=project_root,
    )


def get_config() -> FeatureLevelsConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        FeatureLevelsConfig (may be empty if no pyproject.toml or no [tool.featurelevels] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return FeatureLevelsConfig()
    return load_config(pyproject_path)
