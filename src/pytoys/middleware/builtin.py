# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Builtin middleware forming the default stack."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Final

from rich.text import Text

from ..core.logging import configure_logging
from ..definition.model_params import FlagSpec, canonical_key
from ..names import display_name
from ..reporting.help import HelpRenderer
from .base import Middleware, Proceed

if TYPE_CHECKING:
    from ..definition.model_tool import ToolDefinition
    from ..loader.loader import Loader
    from ..runtime.context import Context

USAGE_EXIT_CODE: Final[int] = 2

DEFAULT_ROOT_DESC: Final[str] = "Your tools"
DEFAULT_GROUP_DESC: Final[str] = "(A group of tools)"
DEFAULT_TOOL_DESC: Final[str] = "(No tool description available)"

HELP_KEY: Final[str] = "_help"
USAGE_KEY: Final[str] = "_usage"
RECURSIVE_KEY: Final[str] = "_recursive"
ALL_KEY: Final[str] = "_all"
VERBOSE_KEY: Final[str] = "_verbose"
QUIET_KEY: Final[str] = "_quiet"


def add_flag_if_free(tool: ToolDefinition, key: str, switches: Sequence[str], *, desc: str, **extra: object) -> bool:
    """Add an internal flag using whichever of ``switches`` the tool leaves free.

    Returns:
        bool: ``True`` when the flag was added.
    """

    taken = {option for flag in tool.flags for option in flag.option_strings}
    free = tuple(switch for switch in switches if switch not in taken)
    if not free or canonical_key(key) in tool.used_keys:
        return False
    tool.add_flag(FlagSpec(key, free, desc=desc, **extra))
    return True


class SetDefaultDescriptions(Middleware):
    """Give tools without a description a generic one."""

    name = "set_default_descriptions"

    def config(self, tool: ToolDefinition, loader: Loader) -> None:
        if tool.desc or tool.is_alias:
            return
        if tool.is_root:
            tool.set_desc(DEFAULT_ROOT_DESC)
        elif tool.is_runnable:
            tool.set_desc(DEFAULT_TOOL_DESC)
        else:
            tool.set_desc(DEFAULT_GROUP_DESC)


class ShowHelp(Middleware):
    """Add help flags and render help for groups and on request."""

    name = "show_help"

    def config(self, tool: ToolDefinition, loader: Loader) -> None:
        add_flag_if_free(tool, HELP_KEY, ("-?", "-h", "--help"), desc="Display help for this tool", default=False)
        add_flag_if_free(tool, USAGE_KEY, ("--usage",), desc="Display a brief usage string", default=False)
        if not tool.is_runnable:
            add_flag_if_free(tool, RECURSIVE_KEY, ("-r", "--recursive"), desc="List all subtools", default=False)
            add_flag_if_free(tool, ALL_KEY, ("--all",), desc="Include hidden subtools", default=False)

    def run(self, context: Context, proceed: Proceed) -> int:
        renderer = HelpRenderer(context.tool, context.loader, executable_name=context.executable_name)
        recursive = bool(context.get(RECURSIVE_KEY))
        include_hidden = bool(context.get(ALL_KEY))
        if context.get(HELP_KEY):
            context.console.print(renderer.help(recursive=recursive, include_hidden=include_hidden))
            return 0
        if context.get(USAGE_KEY):
            context.console.print(renderer.usage())
            return 0
        if context.tool.is_runnable or context.usage_errors:
            return proceed()
        if context.unmatched_args:
            missing = display_name((*context.tool.full_name, context.unmatched_args[0]))
            context.error_console.print(Text(f"Tool not found: {missing}", style="red"))
            context.error_console.print(renderer.usage())
            return USAGE_EXIT_CODE
        context.console.print(renderer.help(recursive=recursive, include_hidden=include_hidden))
        return 0


class HandleUsageErrors(Middleware):
    """Report argument parsing errors instead of running the tool."""

    name = "handle_usage_errors"

    def run(self, context: Context, proceed: Proceed) -> int:
        if not context.usage_errors:
            return proceed()
        for message in context.usage_errors:
            context.error_console.print(Text(message, style="red"))
        renderer = HelpRenderer(context.tool, context.loader, executable_name=context.executable_name)
        context.error_console.print(renderer.usage())
        return USAGE_EXIT_CODE


class AddVerbosityFlags(Middleware):
    """Add ``-v`` and ``-q`` flags that adjust the context verbosity."""

    name = "add_verbosity_flags"

    def config(self, tool: ToolDefinition, loader: Loader) -> None:
        add_flag_if_free(tool, VERBOSE_KEY, ("-v", "--verbose"), desc="Increase verbosity", default=0, repeatable=True)
        add_flag_if_free(tool, QUIET_KEY, ("-q", "--quiet"), desc="Decrease verbosity", default=0, repeatable=True)

    def run(self, context: Context, proceed: Proceed) -> int:
        delta = int(context.get(VERBOSE_KEY) or 0) - int(context.get(QUIET_KEY) or 0)
        if delta:
            context.verbosity += delta
            configure_logging(context.verbosity)
        return proceed()


BUILTIN_MIDDLEWARE: tuple[type[Middleware], ...] = (
    SetDefaultDescriptions,
    ShowHelp,
    HandleUsageErrors,
    AddVerbosityFlags,
)

DEFAULT_STACK: tuple[str, ...] = tuple(cls.name for cls in BUILTIN_MIDDLEWARE)


__all__ = [
    "BUILTIN_MIDDLEWARE",
    "DEFAULT_STACK",
    "USAGE_EXIT_CODE",
    "AddVerbosityFlags",
    "HandleUsageErrors",
    "SetDefaultDescriptions",
    "ShowHelp",
    "add_flag_if_free",
]
