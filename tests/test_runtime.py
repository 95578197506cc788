# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Argument parsing, the middleware chain, and exit codes of tool runs."""

from __future__ import annotations

import pytest

from pytoys import Loader, ToolDsl
from pytoys.definition.model_params import ArgKind, ArgSpec, FlagSpec
from pytoys.definition.model_tool import ToolDefinition
from pytoys.errors import ToolDefinitionError
from pytoys.middleware.base import Middleware
from pytoys.middleware.builtin import USAGE_EXIT_CODE
from pytoys.runtime.context import Context
from pytoys.runtime.parsing import default_values, parse_args
from pytoys.runtime.runner import FAILURE_EXIT_CODE, exit_code_for


def _greeter(t: ToolDsl) -> None:
    @t.tool("greet")
    def greet(t: ToolDsl) -> None:
        t.desc("Print a greeting")
        t.flag("shout", "-s", "--shout", desc="Use capitals")
        t.flag("times", "--times=COUNT", accept="integer", default=1)
        t.optional_arg("name", default="world")

        @t.run
        def run(ctx: Context) -> None:
            message = f"hello {ctx['name']}" * int(ctx["times"])
            ctx.console.print(message.upper() if ctx["shout"] else message)

    @t.tool("ns")
    def ns(t: ToolDsl) -> None:
        t.desc("Namespace")
        t.tool("two", alias_of="one")

        @t.tool("one")
        def one(t: ToolDsl) -> None:
            t.desc("First tool")
            t.run(lambda ctx: 0)


@pytest.fixture
def greeter() -> Loader:
    return Loader().add_block(_greeter)


def _leaf(*, flags: tuple[FlagSpec, ...] = (), args: tuple[ArgSpec, ...] = ()) -> ToolDefinition:
    tool = ToolDefinition(("leaf",))
    tool.begin_block(0)
    tool.claim(0, None)
    for flag in flags:
        tool.add_flag(flag)
    for arg in args:
        tool.add_arg(arg)
    tool.set_executor(lambda ctx: 0)
    tool.end_block()
    return tool


@pytest.mark.parametrize(
    ("result", "code"),
    [(None, 0), (True, 0), (False, FAILURE_EXIT_CODE), (7, 7), ("done", 0)],
)
def test_exit_code_for(result: object, code: int) -> None:
    assert exit_code_for(result) == code


def test_flags_and_arguments_reach_the_executor(greeter: Loader, run) -> None:
    outcome = run(greeter, ["greet", "-s", "--times", "2", "bob"])

    assert outcome.code == 0
    assert "HELLO BOBHELLO BOB" in outcome.out


def test_defaults_apply_when_nothing_is_given(greeter: Loader, run) -> None:
    outcome = run(greeter, ["greet"])

    assert outcome.code == 0
    assert outcome.out.strip() == "hello world"


def test_usage_errors_exit_with_status_two(greeter: Loader, run) -> None:
    outcome = run(greeter, ["greet", "--times", "many"])

    assert outcome.code == USAGE_EXIT_CODE
    assert "Invalid value" in outcome.err
    assert "Usage: pytoys greet" in outcome.err
    assert outcome.out == ""


def test_unknown_flags_are_usage_errors(greeter: Loader, run) -> None:
    outcome = run(greeter, ["greet", "--bogus"])

    assert outcome.code == USAGE_EXIT_CODE
    assert "--bogus" in outcome.err


def test_help_flag_renders_help_instead_of_running(greeter: Loader, run) -> None:
    outcome = run(greeter, ["greet", "--help"])

    assert outcome.code == 0
    assert "pytoys greet - Print a greeting" in outcome.out
    assert "--times=COUNT" in outcome.out
    assert "[NAME]" in outcome.out
    assert "hello" not in outcome.out


def test_usage_flag_renders_the_synopsis(greeter: Loader, run) -> None:
    outcome = run(greeter, ["greet", "--usage"])

    assert outcome.out.startswith("Usage: pytoys greet [FLAGS...] [NAME]")


def test_groups_list_their_subtools(greeter: Loader, run) -> None:
    outcome = run(greeter, ["ns"])

    assert outcome.code == 0
    assert "pytoys ns - Namespace" in outcome.out
    assert "First tool" in outcome.out
    assert "(Alias of ns one)" in outcome.out


def test_unknown_subtool_of_a_group_is_reported(greeter: Loader, run) -> None:
    outcome = run(greeter, ["ns", "three"])

    assert outcome.code == USAGE_EXIT_CODE
    assert "Tool not found: ns three" in outcome.err


def test_root_help_lists_top_level_tools(greeter: Loader, run) -> None:
    outcome = run(greeter, [])

    assert outcome.code == 0
    assert "greet" in outcome.out
    assert "Your tools" in outcome.out


def test_verbosity_flags_adjust_the_context(loader: Loader, run) -> None:
    seen: list[int] = []
    loader.add_block(lambda t: t.tool("v", lambda t: t.run(lambda ctx: seen.append(ctx.verbosity))))

    run(loader, ["v", "-v", "-v", "-q"])

    assert seen == [1]


def test_context_exit_stops_with_the_given_code(loader: Loader, run) -> None:
    loader.add_block(lambda t: t.tool("stop", lambda t: t.run(lambda ctx: ctx.exit(3))))

    assert run(loader, ["stop"]).code == 3


def test_mixins_extend_the_context(loader: Loader, run) -> None:
    def configure(t: ToolDsl) -> None:
        @t.tool("say")
        def say(t: ToolDsl) -> None:
            t.mixin("terminal")
            t.run(lambda ctx: ctx.puts("from a mixin"))

    loader.add_block(configure)

    outcome = run(loader, ["say"])

    assert outcome.code == 0
    assert "from a mixin" in outcome.out


def test_missing_context_attributes_raise_attribute_error(loader: Loader) -> None:
    loader.add_block(lambda t: t.tool("x", lambda t: t.run(lambda ctx: 0)))
    tool = loader.lookup(["x"]).tool
    context = Context(tool=tool, loader=loader)

    with pytest.raises(AttributeError):
        context.puts  # noqa: B018


def test_middleware_wrap_in_stack_order(run) -> None:
    events: list[str] = []

    class Recorder(Middleware):
        def __init__(self, label: str) -> None:
            self.label = label

        def config(self, tool: ToolDefinition, loader: Loader) -> None:
            events.append(f"config {self.label} {tool.display_name}")

        def run(self, context: Context, proceed) -> int:
            events.append(f"enter {self.label}")
            code = proceed()
            events.append(f"exit {self.label}")
            return code

    loader = Loader(middleware_stack=[Recorder("outer"), Recorder("inner")])
    loader.add_block(lambda t: t.tool("job", lambda t: t.run(lambda ctx: events.append("run"))))

    run(loader, ["job"])

    assert events[-5:] == ["enter outer", "enter inner", "run", "exit inner", "exit outer"]
    assert events.count("config outer job") == 1


def test_tool_middleware_is_inherited_by_subtools(loader: Loader, run) -> None:
    def configure(t: ToolDsl) -> None:
        @t.tool("plain")
        def plain(t: ToolDsl) -> None:
            t.middleware()

            @t.tool("leaf")
            def leaf(t: ToolDsl) -> None:
                t.run(lambda ctx: len(ctx.usage_errors))

    loader.add_block(configure)

    leaf = loader.lookup(["plain", "leaf"]).tool

    assert loader.effective_middleware(leaf) == ()
    assert leaf.flags == ()
    assert run(loader, ["plain", "leaf", "--help"]).code == 1


def test_unknown_middleware_names_are_rejected() -> None:
    with pytest.raises(ToolDefinitionError, match="Unknown middleware"):
        Loader(middleware_stack=["no_such_middleware"])


def test_parse_args_collects_unmatched_words_for_groups() -> None:
    group = ToolDefinition(("group",))

    result = parse_args(group, ["missing", "extra"])

    assert result.usage_errors == ()
    assert result.unmatched_args == ("missing", "extra")


def test_parse_args_handles_negatable_and_remaining_values() -> None:
    tool = _leaf(
        flags=(FlagSpec("color", ("--[no-]color",), default=True),),
        args=(ArgSpec("files", ArgKind.REMAINING, default=()),),
    )

    result = parse_args(tool, ["--no-color", "a", "b"])

    assert result.data == {"color": False, "files": ("a", "b")}


def test_parse_failures_keep_default_values() -> None:
    tool = _leaf(
        flags=(FlagSpec("count", ("-c", "--count"), repeatable=True),),
        args=(ArgSpec("target"),),
    )

    result = parse_args(tool, [])

    assert result.usage_errors and "Missing argument" in result.usage_errors[0]
    assert result.data == default_values(tool) == {"count": 0, "target": None}
