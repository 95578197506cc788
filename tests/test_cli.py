# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Standard CLI: configuration discovery, builtin tools, and the typer entry point."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from pytoys import __version__
from pytoys.cli import StandardCli
from pytoys.cli.app import app, main
from pytoys.config import ToysSettings


def console_text(console) -> str:
    return console.file.getvalue()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    (root / "sub" / ".toys").mkdir(parents=True)
    (root / ".toys.toml").write_text(
        '[tool.hello]\ndesc = "Project hello"\nexec = ["true"]\n\n'
        '[tool.build]\ndesc = "Project build"\nexec = ["true"]\n',
        encoding="utf-8",
    )
    (root / "sub" / ".toys" / "hello.toml").write_text('desc = "Nearer hello"\nexec = ["true"]\n', encoding="utf-8")
    (root / "sub" / ".toys" / "chain.py").write_text(
        "def configure(t):\n    t.run(lambda ctx: ctx.run_tool('system', 'version'))\n",
        encoding="utf-8",
    )
    return root


@pytest.fixture
def make_cli(project: Path, tmp_path: Path, console_factory):
    def factory(cwd: Path | None = None, **settings: object) -> StandardCli:
        options: dict[str, object] = {"search_paths": [project], "git_cache_dir": tmp_path / "git"}
        options.update(settings)
        return StandardCli(
            ToysSettings(**options),
            cwd=cwd or project / "sub",
            console=console_factory(),
            error_console=console_factory(),
        )

    return factory


def test_search_stops_at_global_directories(make_cli, project: Path) -> None:
    cli = make_cli()

    assert list(cli.search_directories()) == [(project / "sub").resolve(), project.resolve()]


def test_configuration_directories_are_not_searched_from_inside(make_cli, project: Path) -> None:
    cli = make_cli(cwd=project / "sub" / ".toys")

    assert list(cli.search_directories())[0] == (project / "sub").resolve()


def test_nearer_configuration_has_higher_priority(make_cli) -> None:
    cli = make_cli()

    assert cli.loader.lookup(["hello"]).tool.desc == "Nearer hello"
    assert cli.loader.lookup(["build"]).tool.desc == "Project build"


def test_config_candidates_list_files_and_the_directory(make_cli, project: Path) -> None:
    cli = make_cli()

    assert cli.config_candidates(project) == [project / ".toys.toml"]
    assert cli.config_candidates(project / "sub") == [project / "sub" / ".toys"]


def test_system_version_prints_the_version(make_cli) -> None:
    cli = make_cli()

    assert cli.run(["system", "version"]) == 0
    assert console_text(cli.console).strip() == f"pytoys {__version__}"


def test_system_tools_lists_discovered_tools(make_cli) -> None:
    cli = make_cli()

    assert cli.run(["system", "tools"]) == 0
    listing = console_text(cli.console)
    assert "Nearer hello" in listing
    assert "system version" in listing
    assert "Project hello" not in listing


def test_system_tools_reports_missing_groups(make_cli) -> None:
    cli = make_cli()

    assert cli.run(["system", "tools", "nope"]) == 1
    assert "No such tool group: nope" in console_text(cli.error_console)


def test_builtins_can_be_disabled(make_cli) -> None:
    cli = make_cli(include_builtins=False)

    assert cli.loader.lookup(["system", "version"]).tool.is_root


def test_tools_can_run_other_tools(make_cli) -> None:
    cli = make_cli()

    assert cli.run(["chain"]) == 0
    assert f"pytoys {__version__}" in console_text(cli.console)


def test_configuration_errors_exit_with_status_one(make_cli, project: Path) -> None:
    (project / "sub" / ".toys" / "broken.toml").write_text("[tool\n", encoding="utf-8")
    cli = make_cli()

    assert cli.run(["broken"]) == 1
    assert "Error:" in console_text(cli.error_console)
    assert "broken.toml" in console_text(cli.error_console)


def test_typer_app_passes_arguments_through(project: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(project / "sub")
    env = {
        "PYTOYS_CONFIG": str(tmp_path / "missing.toml"),
        "TOYS_PATH": str(project),
        "PYTOYS_GIT_CACHE_DIR": str(tmp_path / "git"),
    }

    result = CliRunner().invoke(app, ["--", "system", "version", "--usage"], env=env)

    assert result.exit_code == 0
    assert "Usage: pytoys system version" in result.output


def test_typer_app_reports_invalid_settings(tmp_path: Path) -> None:
    env = {"PYTOYS_CONFIG": str(tmp_path / "missing.toml"), "PYTOYS_VERBOSITY": "loud"}

    result = CliRunner().invoke(app, ["--", "system"], env=env)

    assert result.exit_code == 1
    assert "Invalid pytoys settings" in result.output


def test_main_exits_with_the_tool_status(
    project: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.chdir(project / "sub")
    monkeypatch.setenv("PYTOYS_CONFIG", str(tmp_path / "missing.toml"))
    monkeypatch.setenv("TOYS_PATH", str(project))

    with pytest.raises(SystemExit) as info:
        main(["system", "version"])

    assert info.value.code == 0
    assert f"pytoys {__version__}" in capsys.readouterr().out
