# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Execution context handed to middleware, mixins, and executors."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console

from ..errors import UsageError
from ..names import ToolName

if TYPE_CHECKING:
    from ..cli.standard import StandardCli
    from ..definition.model_tool import ToolDefinition
    from ..loader.loader import Loader

TOOL_LOGGER_PREFIX = "pytoys.tool"


class ToolExit(Exception):
    """Raised by :meth:`Context.exit` to stop a tool with an exit code."""

    def __init__(self, code: int = 0) -> None:
        super().__init__(code)
        self.code = code


class Context(Mapping[str, object]):
    """Parsed arguments plus the services available while a tool runs.

    Values are read with mapping access using flag and argument keys
    (``ctx["force"]``). Attributes not defined here are looked up on the
    tool's mixin instances in declaration order.
    """

    def __init__(
        self,
        *,
        tool: ToolDefinition,
        loader: Loader,
        args: Sequence[str] = (),
        data: Mapping[str, object] | None = None,
        usage_errors: Sequence[str] = (),
        unmatched_args: Sequence[str] = (),
        verbosity: int = 0,
        executable_name: str = "pytoys",
        console: Console | None = None,
        error_console: Console | None = None,
        cli: StandardCli | None = None,
    ) -> None:
        self.tool = tool
        self.loader = loader
        self.args = tuple(args)
        self._data: dict[str, object] = dict(data or {})
        self.usage_errors = list(usage_errors)
        self.unmatched_args = tuple(unmatched_args)
        self.verbosity = verbosity
        self.executable_name = executable_name
        self.console = console or Console()
        self.error_console = error_console or Console(stderr=True)
        self.cli = cli
        self._mixins = [mixin(self) if isinstance(mixin, type) else mixin for mixin in tool.mixins]

    # ------------------------------------------------------------------
    # mapping protocol

    def __getitem__(self, key: str) -> object:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def set(self, key: str, value: object) -> None:
        self._data[key] = value

    # ------------------------------------------------------------------
    # services

    @property
    def tool_name(self) -> ToolName:
        return self.tool.full_name

    @property
    def logger(self) -> logging.Logger:
        suffix = ".".join(self.tool.full_name) or "root"
        return logging.getLogger(f"{TOOL_LOGGER_PREFIX}.{suffix}")

    @property
    def context_directory(self) -> Path | None:
        source = self.tool.source
        return source.context_directory if source is not None else None

    def find_data(self, relative: str | Path) -> Path | None:
        return self.tool.find_data(relative)

    def usage_error(self) -> UsageError | None:
        return UsageError(self.usage_errors) if self.usage_errors else None

    def exit(self, code: int = 0) -> None:
        """Stop the tool immediately with ``code``."""

        raise ToolExit(code)

    def run_tool(self, *args: str) -> int:
        """Run another tool through the owning CLI and return its exit code.

        Raises:
            RuntimeError: If the context was created without a CLI.
        """

        if self.cli is None:
            raise RuntimeError("This context is not attached to a CLI")
        return self.cli.run(list(args), verbosity=self.verbosity)

    def __getattr__(self, name: str) -> object:
        if name.startswith("_"):
            raise AttributeError(name)
        for mixin in self.__dict__.get("_mixins", ()):
            if hasattr(mixin, name):
                return getattr(mixin, name)
        raise AttributeError(f"{type(self).__name__!s} has no attribute {name!r}")


__all__ = ["Context", "ToolExit"]
