# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Settings for the standard CLI, layered from defaults, a TOML file, and the environment."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ToolDefinitionError
from ..names import validate_delimiters

ENV_PREFIX: Final[str] = "PYTOYS_"
TOYS_PATH_ENV: Final[str] = "TOYS_PATH"
CONFIG_PATH_ENV: Final[str] = "PYTOYS_CONFIG"
SETTINGS_KEY: Final[str] = "pytoys"

_ENV_FIELDS: Final[dict[str, str]] = {
    "EXECUTABLE_NAME": "executable_name",
    "CONFIG_DIR_NAME": "config_dir_name",
    "INDEX_FILE_STEM": "index_file_stem",
    "PRELOAD_FILE_NAME": "preload_file_name",
    "DATA_DIR_NAME": "data_dir_name",
    "EXTRA_DELIMITERS": "extra_delimiters",
    "GIT_CACHE_DIR": "git_cache_dir",
    "INCLUDE_BUILTINS": "include_builtins",
    "VERBOSITY": "verbosity",
}


class ConfigError(RuntimeError):
    """Raised when settings cannot be loaded or fail validation."""


def default_search_paths() -> list[Path]:
    return [Path.home(), Path("/etc")]


def default_git_cache_dir(env: Mapping[str, str] | None = None) -> Path:
    """Return the cache directory for remote sources, honouring ``XDG_CACHE_HOME``."""

    environ = os.environ if env is None else env
    base = environ.get("XDG_CACHE_HOME")
    root = Path(base) if base else Path.home() / ".cache"
    return root / "pytoys" / "git"


def default_config_path(env: Mapping[str, str] | None = None) -> Path:
    environ = os.environ if env is None else env
    explicit = environ.get(CONFIG_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    base = environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / "pytoys" / "config.toml"


class ToysSettings(BaseModel):
    """Options controlling tool discovery for the standard CLI.

    Attributes:
        executable_name: Name shown in usage lines.
        config_dir_name: Directory name searched for in the working directory and its parents.
        index_file_stem: Stem of configuration files and directory index files.
        preload_file_name: Python file imported before a directory's tools load.
        data_dir_name: Data directory name inside configuration directories.
        extra_delimiters: Characters besides whitespace that separate tool name words.
        search_paths: Global directories consulted after the working directory chain.
        git_cache_dir: Where remote git sources are materialised.
        include_builtins: Whether the packaged builtin tools are registered.
        verbosity: Starting verbosity for every run.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    executable_name: str = "pytoys"
    config_dir_name: str = ".toys"
    index_file_stem: str = ".toys"
    preload_file_name: str = ".preload.py"
    data_dir_name: str = ".data"
    extra_delimiters: str = ".:"
    search_paths: list[Path] = Field(default_factory=default_search_paths)
    git_cache_dir: Path = Field(default_factory=default_git_cache_dir)
    include_builtins: bool = True
    verbosity: int = 0

    @field_validator("extra_delimiters")
    @classmethod
    def _check_delimiters(cls, value: str) -> str:
        try:
            return validate_delimiters(value)
        except ToolDefinitionError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("search_paths", mode="before")
    @classmethod
    def _split_search_paths(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [Path(entry).expanduser() for entry in value.split(os.pathsep) if entry]
        return value


def read_settings_file(path: Path) -> dict[str, Any]:
    """Return the ``[pytoys]`` table of ``path``, or the whole document when absent.

    Raises:
        ConfigError: If the file cannot be parsed or is not a table.
    """

    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read settings from {path}: {exc.strerror or exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    table = document.get(SETTINGS_KEY, document)
    if not isinstance(table, dict):
        raise ConfigError(f"Settings at {path} must be a table")
    return dict(table)


def env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``PYTOYS_*`` and ``TOYS_PATH`` overrides from ``env``."""

    overrides: dict[str, Any] = {}
    for suffix, field_name in _ENV_FIELDS.items():
        value = env.get(f"{ENV_PREFIX}{suffix}")
        if value is not None:
            overrides[field_name] = value
    toys_path = env.get(TOYS_PATH_ENV)
    if toys_path is not None:
        overrides["search_paths"] = toys_path
    return overrides


def load_settings(
    *,
    env: Mapping[str, str] | None = None,
    config_path: Path | None = None,
    **overrides: Any,
) -> ToysSettings:
    """Build settings from defaults, the settings file, the environment, and overrides.

    Later layers win: file values replace defaults, environment variables
    replace file values, and keyword overrides replace everything.

    Args:
        env: Environment mapping; defaults to :data:`os.environ`.
        config_path: Settings file; defaults to ``$XDG_CONFIG_HOME/pytoys/config.toml``.
        **overrides: Explicit field values.

    Returns:
        ToysSettings: Validated settings.

    Raises:
        ConfigError: If the file is unreadable or any value is invalid.
    """

    environ = os.environ if env is None else env
    path = config_path or default_config_path(environ)
    payload: dict[str, Any] = {"git_cache_dir": default_git_cache_dir(environ)}
    if path.is_file():
        payload.update(read_settings_file(path))
    payload.update(env_overrides(environ))
    payload.update(overrides)
    try:
        return ToysSettings.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid pytoys settings: {exc}") from exc


__all__ = [
    "ConfigError",
    "ToysSettings",
    "default_config_path",
    "default_git_cache_dir",
    "default_search_paths",
    "env_overrides",
    "load_settings",
    "read_settings_file",
]
