# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typer entry point for the ``pytoys`` executable."""

from __future__ import annotations

import sys
from collections.abc import Sequence

import typer

from ..config.settings import ConfigError, load_settings
from ..core.logging import configure_logging, fail
from .shared import CLIError
from .standard import StandardCli

PASS_THROUGH_SETTINGS = {
    "allow_extra_args": True,
    "ignore_unknown_options": True,
    "help_option_names": [],
}

app = typer.Typer(add_completion=False, no_args_is_help=False)


def _build_cli() -> StandardCli:
    try:
        settings = load_settings()
    except ConfigError as exc:
        raise CLIError(str(exc)) from exc
    configure_logging(settings.verbosity)
    return StandardCli(settings)


@app.command(context_settings=PASS_THROUGH_SETTINGS, add_help_option=False)
def run_tool(ctx: typer.Context) -> None:
    """Run the tool named by the command line."""

    try:
        cli = _build_cli()
    except CLIError as exc:
        fail(str(exc), use_emoji=True)
        raise typer.Exit(code=exc.exit_code) from exc
    raise typer.Exit(code=cli.run(list(ctx.args)))


def main(argv: Sequence[str] | None = None) -> None:
    """Console script entry point passing every argument to the tool runner."""

    args = list(sys.argv[1:] if argv is None else argv)
    # A leading separator makes click treat every remaining word as an extra argument.
    app(args=["--", *args], prog_name="pytoys")


__all__ = ["app", "main"]
