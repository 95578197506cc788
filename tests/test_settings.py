# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Settings layering for the standard CLI."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from pytoys.config import ConfigError, ToysSettings, load_settings
from pytoys.config.settings import default_config_path, default_git_cache_dir


def _settings_file(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_without_file_or_environment(tmp_path: Path) -> None:
    settings = load_settings(env={}, config_path=tmp_path / "missing.toml")

    assert settings.executable_name == "pytoys"
    assert settings.index_file_stem == ".toys"
    assert settings.extra_delimiters == ".:"
    assert settings.include_builtins is True
    assert settings.git_cache_dir == Path.home() / ".cache" / "pytoys" / "git"


def test_file_environment_and_overrides_layer_in_order(tmp_path: Path) -> None:
    config = _settings_file(
        tmp_path,
        '[pytoys]\nexecutable_name = "from-file"\nverbosity = 1\ndata_dir_name = "share"\n',
    )
    env = {"PYTOYS_EXECUTABLE_NAME": "from-env", "PYTOYS_VERBOSITY": "2"}

    settings = load_settings(env=env, config_path=config, verbosity=3)

    assert settings.data_dir_name == "share"
    assert settings.executable_name == "from-env"
    assert settings.verbosity == 3


def test_settings_file_without_a_table_is_read_whole(tmp_path: Path) -> None:
    config = _settings_file(tmp_path, "include_builtins = false\n")

    assert load_settings(env={}, config_path=config).include_builtins is False


def test_toys_path_splits_on_the_path_separator(tmp_path: Path) -> None:
    first, second = tmp_path / "a", tmp_path / "b"
    env = {"TOYS_PATH": os.pathsep.join([str(first), "", str(second)])}

    settings = load_settings(env=env, config_path=tmp_path / "missing.toml")

    assert settings.search_paths == [first, second]


def test_environment_booleans_are_coerced(tmp_path: Path) -> None:
    settings = load_settings(env={"PYTOYS_INCLUDE_BUILTINS": "false"}, config_path=tmp_path / "missing.toml")

    assert settings.include_builtins is False


@pytest.mark.parametrize(
    "text",
    ['[pytoys]\nextra_delimiters = ","\n', '[pytoys]\nunknown = 1\n', '[pytoys]\nverbosity = "loud"\n'],
)
def test_invalid_values_raise_config_error(tmp_path: Path, text: str) -> None:
    with pytest.raises(ConfigError, match="Invalid pytoys settings"):
        load_settings(env={}, config_path=_settings_file(tmp_path, text))


def test_unparseable_settings_file_raises_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_settings(env={}, config_path=_settings_file(tmp_path, "[pytoys\n"))


def test_xdg_locations_are_honoured(tmp_path: Path) -> None:
    env = {"XDG_CACHE_HOME": str(tmp_path / "cache"), "XDG_CONFIG_HOME": str(tmp_path / "config")}

    assert default_git_cache_dir(env) == tmp_path / "cache" / "pytoys" / "git"
    assert default_config_path(env) == tmp_path / "config" / "pytoys" / "config.toml"
    assert default_config_path({"PYTOYS_CONFIG": str(tmp_path / "x.toml")}) == tmp_path / "x.toml"


def test_assignment_is_validated() -> None:
    settings = ToysSettings(search_paths=[])

    with pytest.raises(ValueError):
        settings.extra_delimiters = "#"
