# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Executors for the builtin ``system`` tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

from .. import __version__
from ..names import display_name

if TYPE_CHECKING:
    from ..runtime.context import Context


def show_version(context: Context) -> int:
    context.console.print(f"{context.executable_name} {__version__}")
    return 0


def list_tools(context: Context) -> int:
    """Print every finished tool below the requested group.

    Args:
        context: Run context carrying ``prefix`` words and the ``hidden`` flag.

    Returns:
        int: ``0`` when the group exists, ``1`` otherwise.
    """

    prefix = context.loader.split_path(list(context.get("prefix") or ()))
    group = context.loader.lookup_specific(prefix)
    if group is None:
        context.error_console.print(f"No such tool group: {display_name(prefix)}")
        return 1
    tools = context.loader.list_subtools(prefix, recursive=True, include_hidden=bool(context.get("hidden")))
    table = Table(box=None, show_header=False, padding=(0, 2, 0, 0))
    table.add_column("tool", style="cyan", no_wrap=True)
    table.add_column("desc")
    for tool in tools:
        if tool.is_alias and tool.alias_target is not None:
            desc = f"(Alias of {display_name(tool.alias_target)})"
        else:
            desc = tool.desc
        table.add_row(" ".join(tool.full_name), desc)
    context.console.print(table)
    return 0


__all__ = ["list_tools", "show_version"]
