# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Run a resolved tool through its middleware chain."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Final

from rich.console import Console

from ..middleware.base import Middleware, Proceed
from .context import Context, ToolExit
from .parsing import parse_args

if TYPE_CHECKING:
    from ..cli.standard import StandardCli
    from ..definition.model_tool import ToolDefinition
    from ..loader.loader import Loader

LOGGER = logging.getLogger(__name__)

FAILURE_EXIT_CODE: Final[int] = 1


def exit_code_for(result: object) -> int:
    """Map an executor return value onto a process exit code.

    Integers pass through, ``False`` means failure, and anything else
    (including ``None`` and ``True``) means success.
    """

    if isinstance(result, bool):
        return 0 if result else FAILURE_EXIT_CODE
    if isinstance(result, int):
        return result
    return 0


class Runner:
    """Parse arguments for one tool and execute it.

    Middleware run in stack order, the first entry wrapping all the others,
    and the tool executor runs innermost.
    """

    def __init__(
        self,
        loader: Loader,
        tool: ToolDefinition,
        *,
        executable_name: str = "pytoys",
        console: Console | None = None,
        error_console: Console | None = None,
        cli: StandardCli | None = None,
    ) -> None:
        self.loader = loader
        self.tool = tool
        self.executable_name = executable_name
        self.console = console
        self.error_console = error_console
        self.cli = cli

    def build_context(self, args: Sequence[str], *, verbosity: int = 0) -> Context:
        result = parse_args(self.tool, args, name=self.executable_name)
        return Context(
            tool=self.tool,
            loader=self.loader,
            args=args,
            data=result.data,
            usage_errors=result.usage_errors,
            unmatched_args=result.unmatched_args,
            verbosity=verbosity,
            executable_name=self.executable_name,
            console=self.console,
            error_console=self.error_console,
            cli=self.cli,
        )

    def run(self, args: Sequence[str], *, verbosity: int = 0) -> int:
        """Run the tool with ``args`` and return its exit code.

        Args:
            args: Arguments following the tool name.
            verbosity: Starting verbosity for the context.

        Returns:
            int: Exit code produced by the middleware chain or executor.
        """

        context = self.build_context(args, verbosity=verbosity)
        stack = self.loader.effective_middleware(self.tool)
        try:
            return self._chain(context, stack)()
        except ToolExit as exc:
            return exc.code

    def _chain(self, context: Context, stack: Sequence[Middleware]) -> Proceed:
        def innermost() -> int:
            return self._execute(context)

        proceed: Proceed = innermost
        for middleware in reversed(stack):
            proceed = _wrap(middleware, context, proceed)
        return proceed

    def _execute(self, context: Context) -> int:
        executor = self.tool.executor
        if executor is None:
            LOGGER.debug("tool %s has no executor", self.tool.display_name)
            return 0
        LOGGER.debug("running %s", self.tool.display_name)
        return exit_code_for(executor(context))


def _wrap(middleware: Middleware, context: Context, proceed: Proceed) -> Proceed:
    def step() -> int:
        return middleware.run(context, proceed)

    return step


__all__ = ["FAILURE_EXIT_CODE", "Runner", "exit_code_for"]
