# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Builtin templates."""

from __future__ import annotations

import shutil
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ..definition.executors import CommandExecutor
from ..definition.model_params import ArgKind, ArgSpec
from ..loader.directives import DefineSubtool, Directive, SetDescription, SetExecutor, SetRemainingArgs
from .base import Template

if TYPE_CHECKING:
    from ..runtime.context import Context


@dataclass(frozen=True, slots=True)
class CleanExecutor:
    """Delete ``paths`` relative to the directory that defined the tool."""

    paths: tuple[str, ...]

    def __call__(self, context: Context) -> int:
        base = context.context_directory or Path.cwd()
        for entry in self.paths:
            target = base / entry
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            elif target.exists() or target.is_symlink():
                target.unlink()
            else:
                continue
            context.console.print(f"Cleaned: {entry}")
        return 0


class CleanTemplate(Template):
    """Define a tool that deletes build artifacts."""

    name = "clean"

    def __init__(self, paths: Sequence[str] = ("build", "dist"), *, tool_name: str = "clean") -> None:
        self.paths = (paths,) if isinstance(paths, str) else tuple(paths)
        self.tool_name = tool_name

    def directives(self) -> Sequence[Directive]:
        body = (
            SetDescription(f"Delete {', '.join(self.paths)}" if self.paths else "Delete build artifacts"),
            SetExecutor(CleanExecutor(self.paths)),
        )
        return (DefineSubtool(self.tool_name, body=body),)


class PytestTemplate(Template):
    """Define a tool that runs pytest with the current interpreter."""

    name = "pytest"

    def __init__(self, paths: Sequence[str] = (), *, tool_name: str = "test") -> None:
        self.paths = (paths,) if isinstance(paths, str) else tuple(paths)
        self.tool_name = tool_name

    def directives(self) -> Sequence[Directive]:
        body = (
            SetDescription("Run the test suite with pytest"),
            SetRemainingArgs(ArgSpec("pytest_args", ArgKind.REMAINING, default=(), desc="Extra pytest arguments")),
            SetExecutor(CommandExecutor((sys.executable, "-m", "pytest", *self.paths), pass_args="pytest_args")),
        )
        return (DefineSubtool(self.tool_name, body=body),)


BUILTIN_TEMPLATES: tuple[type[Template], ...] = (CleanTemplate, PytestTemplate)


__all__ = ["BUILTIN_TEMPLATES", "CleanExecutor", "CleanTemplate", "PytestTemplate"]
