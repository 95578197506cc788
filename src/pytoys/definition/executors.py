# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Executors attached to runnable tools."""

from __future__ import annotations

import importlib
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias

from ..errors import ToolDefinitionError
from ..runtime.process import CommandOptions, run_command

if TYPE_CHECKING:
    from ..runtime.context import Context

Executor: TypeAlias = Callable[["Context"], object]


@dataclass(frozen=True, slots=True)
class ImportedExecutor:
    """Executor referenced as ``"package.module:function"`` and imported on first run.

    Attributes:
        reference: Import reference of the callable that receives the context.
    """

    reference: str

    def __post_init__(self) -> None:
        module_name, sep, attribute = self.reference.partition(":")
        if not sep or not module_name or not attribute:
            raise ToolDefinitionError(f"Executor reference must look like 'module:function': {self.reference!r}")

    def resolve(self) -> Callable[[Context], object]:
        """Import and return the referenced callable.

        Returns:
            Callable[[Context], object]: Callable invoked with the run context.

        Raises:
            ToolDefinitionError: If the module or attribute cannot be imported.
        """

        module_name, _, attribute = self.reference.partition(":")
        try:
            module = importlib.import_module(module_name)
        except ImportError as exc:
            raise ToolDefinitionError(f"Unable to import executor module {module_name!r}: {exc}") from exc
        target: object = module
        for part in attribute.split("."):
            try:
                target = getattr(target, part)
            except AttributeError as exc:
                raise ToolDefinitionError(f"Executor {self.reference!r} does not exist") from exc
        if not callable(target):
            raise ToolDefinitionError(f"Executor {self.reference!r} is not callable")
        return target

    def __call__(self, context: Context) -> object:
        return self.resolve()(context)


@dataclass(frozen=True, slots=True)
class CommandExecutor:
    """Executor that runs an external command and reports its exit status.

    Attributes:
        argv: Command prefix executed for every run.
        pass_args: Context key whose values are appended to ``argv``.
    """

    argv: tuple[str, ...]
    pass_args: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "argv", tuple(self.argv))
        if not self.argv:
            raise ToolDefinitionError("Command executor requires at least one argument")

    def command(self, context: Context) -> list[str]:
        extra: Sequence[object] = ()
        if self.pass_args is not None:
            extra = context.get(self.pass_args) or ()
        return [*self.argv, *(str(value) for value in extra)]

    def __call__(self, context: Context) -> int:
        context.logger.debug("running command %s", " ".join(self.command(context)))
        completed = run_command(self.command(context), options=CommandOptions(check=False))
        return completed.returncode


__all__ = ["CommandExecutor", "Executor", "ImportedExecutor"]
