"""Configuration loading.

Configuration is read from ``donder-release.toml``, or from the
``[tool.donder-release]`` table of ``pyproject.toml`` when no dedicated
file exists. Both are searched from the working directory upward.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from donder_release.config.models import DEFAULT_CONFIG_FILE, DonderReleaseConfig
from donder_release.exceptions import ConfigNotFoundError, ConfigValidationError
from donder_release.logging import get_logger

log = get_logger(__name__)

PYPROJECT_FILE = "pyproject.toml"
TOOL_TABLE = "donder-release"


def load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file.

    Args:
        path: File to read

    Returns:
        Parsed TOML as a dictionary

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_tool_config(pyproject: dict[str, Any]) -> dict[str, Any] | None:
    """Return the ``[tool.donder-release]`` table, or None when absent."""
    tool = pyproject.get("tool", {})
    return tool.get(TOOL_TABLE)


def find_config_file(start: Path | None = None) -> Path:
    """Find the configuration file by walking up from ``start``.

    In each directory a ``donder-release.toml`` wins over a ``pyproject.toml``
    carrying a ``[tool.donder-release]`` table.

    Raises:
        ConfigNotFoundError: If no configuration is found
    """
    current = (start or Path.cwd()).resolve()

    for directory in (current, *current.parents):
        candidate = directory / DEFAULT_CONFIG_FILE
        if candidate.is_file():
            return candidate

        pyproject = directory / PYPROJECT_FILE
        if not pyproject.is_file():
            continue
        try:
            data = load_toml(pyproject)
        except ConfigValidationError:
            log.debug("skipping unreadable pyproject", path=str(pyproject))
            continue
        if extract_tool_config(data) is not None:
            return pyproject

    raise ConfigNotFoundError(
        f"No {DEFAULT_CONFIG_FILE} found in {current} or its parents. "
        "Run 'donder-release init' to create one."
    )


def parse_config(data: dict[str, Any], source: str = "<config>") -> DonderReleaseConfig:
    """Validate raw configuration data.

    Raises:
        ConfigValidationError: If the data does not describe a valid configuration
    """
    try:
        return DonderReleaseConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigValidationError(f"Invalid configuration in {source}: {problems}") from e


def load_config(path: Path | None = None) -> DonderReleaseConfig:
    """Load and validate the configuration.

    Args:
        path: A configuration file, or a directory to search from.
            Defaults to the current working directory.

    Returns:
        Validated configuration

    Raises:
        ConfigNotFoundError: If no configuration is found
        ConfigValidationError: If the configuration is invalid
    """
    if path is not None and (path.is_file() or path.suffix == ".toml"):
        config_path = path
    else:
        config_path = find_config_file(path)
    data = load_toml(config_path)

    if config_path.name == PYPROJECT_FILE:
        table = extract_tool_config(data)
        if table is None:
            raise ConfigNotFoundError(f"No [tool.{TOOL_TABLE}] table in {config_path}")
        data = table

    return parse_config(data, str(config_path))
