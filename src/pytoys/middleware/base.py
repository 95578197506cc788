# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Middleware protocol shared by builtin and user supplied middleware."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from ..definition.model_tool import ToolDefinition
    from ..loader.loader import Loader
    from ..runtime.context import Context

Proceed = Callable[[], int]


class Middleware:
    """Base class for middleware wrapping tool configuration and execution.

    ``config`` runs once when a tool definition is finished and may add
    flags or descriptions. ``run`` wraps execution and either calls
    ``proceed`` or returns an exit code of its own.
    """

    name: ClassVar[str] = ""

    def config(self, tool: ToolDefinition, loader: Loader) -> None:
        """Adjust ``tool`` after its definition is finished."""

        return None

    def run(self, context: Context, proceed: Proceed) -> int:
        """Wrap tool execution."""

        return proceed()

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


__all__ = ["Middleware", "Proceed"]
