# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Builtin mixins for subprocess execution and terminal output."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from subprocess import CompletedProcess

from rich.prompt import Confirm
from rich.rule import Rule
from rich.text import Text

from ..runtime.process import CommandOptions, run_command
from .base import Mixin


class ExecMixin(Mixin):
    """Run external commands relative to the tool's context directory."""

    name = "exec"

    def _options(self, *, capture: bool, check: bool, cwd: Path | None) -> CommandOptions:
        return CommandOptions(
            cwd=cwd or self.context.context_directory,
            capture_output=capture,
            check=check,
        )

    def exec(
        self,
        argv: Sequence[str],
        *,
        check: bool = False,
        cwd: Path | None = None,
    ) -> CompletedProcess[str]:
        """Run ``argv`` with output attached to the terminal."""

        self.context.logger.debug("exec %s", " ".join(argv))
        return run_command(argv, options=self._options(capture=False, check=check, cwd=cwd))

    def capture(self, argv: Sequence[str], *, cwd: Path | None = None) -> str:
        """Run ``argv`` and return its standard output.

        Raises:
            SubprocessExecutionError: If the command exits with a non-zero status.
        """

        completed = run_command(argv, options=self._options(capture=True, check=True, cwd=cwd))
        return completed.stdout or ""

    def exec_tool(self, *args: str) -> int:
        """Run another tool of the same CLI and return its exit code."""

        return self.context.run_tool(*args)


class TerminalMixin(Mixin):
    """Styled terminal output through the context's rich console."""

    name = "terminal"

    def puts(self, message: str, *, style: str | None = None) -> None:
        self.context.console.print(Text(message, style=style or ""))

    def rule(self, title: str = "") -> None:
        self.context.console.print(Rule(title))

    def confirm(self, prompt: str, *, default: bool = False) -> bool:
        return Confirm.ask(prompt, default=default, console=self.context.console)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        with self.context.console.status(message):
            yield


__all__ = ["ExecMixin", "TerminalMixin"]
