# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from io import StringIO

import pytest
from rich.console import Console

from pytoys.loader.loader import Loader
from pytoys.runtime.runner import Runner


@dataclass(slots=True)
class RunOutcome:
    """Exit code and captured console output of one tool run."""

    code: int
    out: str
    err: str


def make_console() -> Console:
    return Console(file=StringIO(), width=120, color_system=None, force_terminal=False)


def console_text(console: Console) -> str:
    return console.file.getvalue()


def run_tool(loader: Loader, args: Sequence[str]) -> RunOutcome:
    """Look up ``args`` in ``loader`` and run the tool with captured output."""

    console = make_console()
    error_console = make_console()
    result = loader.lookup(list(args))
    runner = Runner(loader, result.tool, console=console, error_console=error_console)
    code = runner.run(result.args)
    return RunOutcome(code=code, out=console_text(console), err=console_text(error_console))


@pytest.fixture
def loader() -> Loader:
    return Loader()


@pytest.fixture
def run():
    """Return :func:`run_tool` so tests can execute tools by command line."""

    return run_tool


@pytest.fixture
def console_factory():
    """Return a factory for rich consoles writing into memory."""

    return make_console
