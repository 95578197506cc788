# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Translate tool definitions into click commands and parse arguments."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import click

from ..definition.acceptors import resolve_acceptor
from ..definition.model_params import ArgKind, ArgSpec, FlagSpec
from ..definition.model_tool import ToolDefinition


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Outcome of parsing a command line against a tool.

    Attributes:
        data: Values keyed by flag and argument keys, defaults included.
        usage_errors: Messages describing why the command line was rejected.
        unmatched_args: Positional words a group could not consume.
    """

    data: Mapping[str, object] = field(default_factory=dict)
    usage_errors: tuple[str, ...] = ()
    unmatched_args: tuple[str, ...] = ()


def _flag_option(flag: FlagSpec) -> click.Option:
    decls = [flag.param_name]
    for entry in flag.syntax:
        decls.append(f"{entry.option}/{entry.negation}" if entry.negation else entry.option)
    if flag.repeatable:
        return click.Option(decls, count=True, default=flag.default or 0, help=flag.desc)
    if flag.takes_value:
        return click.Option(
            decls,
            type=resolve_acceptor(flag.accept),
            default=flag.default,
            metavar=flag.value_label,
            help=flag.desc,
        )
    return click.Option(decls, is_flag=True, default=bool(flag.default), help=flag.desc)


def _argument(arg: ArgSpec) -> click.Argument:
    param_type = resolve_acceptor(arg.accept)
    if arg.kind is ArgKind.REQUIRED:
        return click.Argument([arg.param_name], type=param_type, required=True)
    if arg.kind is ArgKind.OPTIONAL:
        return click.Argument([arg.param_name], type=param_type, required=False, default=arg.default)
    return click.Argument([arg.param_name], type=param_type, required=False, nargs=-1)


def build_command(tool: ToolDefinition, *, name: str | None = None) -> click.Command:
    """Return a click command mirroring the flags and arguments of ``tool``.

    Groups accept extra positional words so unknown subtool names can be
    reported as missing tools rather than parse failures.
    """

    params: list[click.Parameter] = [_flag_option(flag) for flag in tool.flags]
    if tool.is_runnable:
        params.extend(_argument(arg) for arg in tool.positional_args)
    return click.Command(
        name or tool.display_name,
        params=params,
        add_help_option=False,
        context_settings={"allow_extra_args": not tool.is_runnable},
    )


def default_values(tool: ToolDefinition) -> dict[str, object]:
    """Return the value of every flag and argument when none is given."""

    values: dict[str, object] = {}
    for flag in tool.flags:
        if flag.repeatable:
            values[flag.key] = flag.default or 0
        else:
            values[flag.key] = flag.default if flag.default is not None or flag.takes_value else False
    for arg in tool.positional_args:
        values[arg.key] = tuple(arg.default or ()) if arg.kind is ArgKind.REMAINING else arg.default
    return values


def parse_args(tool: ToolDefinition, args: Sequence[str], *, name: str | None = None) -> ParseResult:
    """Parse ``args`` for ``tool``.

    Args:
        tool: Tool whose flags and arguments drive parsing.
        args: Command-line arguments that follow the tool name.
        name: Program name used in click messages.

    Returns:
        ParseResult: Parsed values, or defaults plus usage errors on failure.
    """

    command = build_command(tool, name=name)
    try:
        ctx = command.make_context(command.name, list(args))
    except click.ClickException as exc:
        return ParseResult(data=default_values(tool), usage_errors=(exc.format_message(),))
    data = default_values(tool)
    params = {spec.param_name: spec for spec in (*tool.flags, *tool.positional_args)}
    for param_name, value in ctx.params.items():
        spec = params.get(param_name)
        if spec is None:
            continue
        if isinstance(spec, ArgSpec) and spec.kind is ArgKind.REMAINING:
            value = tuple(value) if value else data[spec.key]
        data[spec.key] = value
    return ParseResult(data=data, unmatched_args=tuple(ctx.args))


__all__ = ["ParseResult", "build_command", "default_values", "parse_args"]
