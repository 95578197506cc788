# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Render usage and help text for tools with rich."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

from ..definition.model_params import ArgKind, ArgSpec, FlagSpec

if TYPE_CHECKING:
    from ..definition.model_tool import ToolDefinition
    from ..loader.loader import Loader

SECTION_STYLE: Final[str] = "bold"


def _flag_label(flag: FlagSpec) -> str:
    parts: list[str] = []
    for entry in flag.syntax:
        if entry.negation is not None:
            parts.append(f"--[no-]{entry.option.removeprefix('--')}")
        elif entry.value_label is not None:
            joiner = "=" if entry.option.startswith("--") else " "
            parts.append(f"{entry.option}{joiner}{entry.value_label}")
        else:
            parts.append(entry.option)
    return ", ".join(parts)


def _arg_label(arg: ArgSpec) -> str:
    if arg.kind is ArgKind.REQUIRED:
        return arg.label
    if arg.kind is ArgKind.OPTIONAL:
        return f"[{arg.label}]"
    return f"[{arg.label}...]"


class HelpRenderer:
    """Build usage and help renderables for one tool.

    Subtool listings come from :meth:`Loader.list_subtools`, which loads the
    subtree below the tool on demand.
    """

    def __init__(self, tool: ToolDefinition, loader: Loader, *, executable_name: str = "pytoys") -> None:
        self.tool = tool
        self.loader = loader
        self.executable_name = executable_name

    @property
    def command_name(self) -> str:
        return " ".join((self.executable_name, *self.tool.full_name))

    def usage_line(self) -> str:
        """Return the one line synopsis of the tool."""

        parts = [self.command_name]
        if self.tool.flags:
            parts.append("[FLAGS...]")
        if self.tool.is_runnable:
            parts.extend(_arg_label(arg) for arg in self.tool.positional_args)
        else:
            parts.append("TOOL [ARGUMENTS...]")
        return " ".join(parts)

    def subtools(self, *, recursive: bool = False, include_hidden: bool = False) -> tuple[ToolDefinition, ...]:
        return self.loader.list_subtools(self.tool.full_name, recursive=recursive, include_hidden=include_hidden)

    def _subtool_table(self, *, recursive: bool, include_hidden: bool) -> Table | None:
        subtools = self.subtools(recursive=recursive, include_hidden=include_hidden)
        if not subtools:
            return None
        table = Table(box=None, show_header=False, padding=(0, 2, 0, 2))
        table.add_column("tool", style="cyan", no_wrap=True)
        table.add_column("desc")
        depth = len(self.tool.full_name)
        for subtool in subtools:
            label = " ".join(subtool.full_name[depth:])
            if subtool.is_alias and subtool.alias_target is not None:
                desc = f"(Alias of {' '.join(subtool.alias_target)})"
            else:
                desc = subtool.desc
            table.add_row(label, desc)
        return table

    def usage(self) -> RenderableType:
        """Return the brief usage renderable."""

        items: list[RenderableType] = [Text(f"Usage: {self.usage_line()}")]
        if not self.tool.is_runnable:
            table = self._subtool_table(recursive=False, include_hidden=False)
            if table is not None:
                items.extend((Text(""), Text("Tools:", style=SECTION_STYLE), table))
        return Group(*items)

    def help(self, *, recursive: bool = False, include_hidden: bool = False) -> RenderableType:
        """Return the full help renderable.

        Args:
            recursive: List subtools of subtools as well.
            include_hidden: Include tools whose names start with an underscore.

        Returns:
            RenderableType: Renderable suitable for ``Console.print``.
        """

        items: list[RenderableType] = [Text("NAME", style=SECTION_STYLE)]
        name_line = self.command_name if not self.tool.desc else f"{self.command_name} - {self.tool.desc}"
        items.append(Text(f"    {name_line}"))
        items.extend((Text(""), Text("SYNOPSIS", style=SECTION_STYLE), Text(f"    {self.usage_line()}")))
        if self.tool.long_desc:
            items.extend((Text(""), Text("DESCRIPTION", style=SECTION_STYLE)))
            items.extend(Text(f"    {line}") for line in self.tool.long_desc.splitlines())
        flags = list(self.tool.flags)
        if flags:
            items.extend((Text(""), Text("FLAGS", style=SECTION_STYLE), self._flags_table(flags)))
        if self.tool.is_runnable and self.tool.positional_args:
            items.extend((Text(""), Text("POSITIONAL ARGUMENTS", style=SECTION_STYLE), self._args_table()))
        table = self._subtool_table(recursive=recursive, include_hidden=include_hidden)
        if table is not None:
            items.extend((Text(""), Text("TOOLS", style=SECTION_STYLE), table))
        return Group(*items)

    @staticmethod
    def _flags_table(flags: list[FlagSpec]) -> Table:
        table = Table(box=None, show_header=False, padding=(0, 2, 0, 4))
        table.add_column("flag", style="green", no_wrap=True)
        table.add_column("desc")
        for flag in sorted(flags, key=lambda entry: entry.option_strings[-1].lstrip("-").lower()):
            table.add_row(_flag_label(flag), flag.desc)
        return table

    def _args_table(self) -> Table:
        table = Table(box=None, show_header=False, padding=(0, 2, 0, 4))
        table.add_column("arg", style="yellow", no_wrap=True)
        table.add_column("desc")
        for arg in self.tool.positional_args:
            table.add_row(_arg_label(arg), arg.desc)
        return table


__all__ = ["HelpRenderer"]
