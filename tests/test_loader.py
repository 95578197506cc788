# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Lookup, laziness, priority, and alias behaviour of the loader."""

from __future__ import annotations

import pytest

from pytoys import Loader, ToolDsl
from pytoys.definition.model_params import FlagSpec
from pytoys.errors import SourceLoadError, ToolDefinitionError
from pytoys.loader.directives import AddFlag, AliasTool, DefineSubtool, SetDescription, SetExecutor


def _noop(context) -> int:
    return 0


def test_lookup_evaluates_only_blocks_on_the_requested_path(loader: Loader) -> None:
    calls: list[str] = []

    def configure(t: ToolDsl) -> None:
        calls.append("root")

        @t.tool("ns")
        def ns(t: ToolDsl) -> None:
            calls.append("ns")

            @t.tool("build")
            def build(t: ToolDsl) -> None:
                calls.append("build")
                t.run(_noop)

        @t.tool("other")
        def other(t: ToolDsl) -> None:
            calls.append("other")
            t.run(_noop)

    loader.add_block(configure)
    result = loader.lookup(["ns", "build", "--fast", "x"])

    assert result.tool.full_name == ("ns", "build")
    assert result.args == ("--fast", "x")
    assert calls == ["root", "ns", "build"]

    loader.lookup(["other"])
    assert calls == ["root", "ns", "build", "other"]


def test_sources_are_not_read_before_the_first_lookup(tmp_path) -> None:
    config = tmp_path / "tools.toml"
    config.write_text('[tool.hello]\ndesc = "hi"\nexec = ["echo"]\n', encoding="utf-8")
    loader = Loader().add_path(config)

    assert loader.loaded_paths == ()
    loader.lookup(["hello"])
    assert loader.loaded_paths == (config,)


def test_repeated_lookups_do_not_reevaluate_sources(loader: Loader) -> None:
    calls: list[str] = []

    def configure(t: ToolDsl) -> None:
        calls.append("root")
        t.tool("a", [SetExecutor(_noop)])

    loader.add_block(configure)
    first = loader.lookup(["a"]).tool
    second = loader.lookup(["a"]).tool

    assert first is second
    assert calls == ["root"]


def test_unknown_words_fall_back_to_the_deepest_existing_ancestor(loader: Loader) -> None:
    loader.add_block([DefineSubtool("ns", body=[SetDescription("namespace")])])

    result = loader.lookup(["ns", "missing", "word"])

    assert result.tool.full_name == ("ns",)
    assert result.args == ("missing", "word")


def test_higher_priority_source_overrides_definition(loader: Loader) -> None:
    loader.add_block([DefineSubtool("greet", body=[SetDescription("low"), SetExecutor(_noop)])])
    loader.add_block([DefineSubtool("greet", body=[SetDescription("high"), SetExecutor(_noop)])], high_priority=True)

    tool = loader.lookup(["greet"]).tool

    assert tool.desc == "high"
    assert tool.definition_priority is not None and tool.definition_priority > 0


def test_lower_priority_content_is_ignored(loader: Loader) -> None:
    loader.add_block(
        [DefineSubtool("greet", body=[AddFlag(FlagSpec("loud")), SetExecutor(_noop)])],
        name="low",
    )
    loader.add_block([DefineSubtool("greet", body=[SetDescription("high")])], high_priority=True)

    tool = loader.lookup(["greet"]).tool

    assert tool.desc == "high"
    assert "loud" not in {flag.key for flag in tool.flags}
    assert not tool.is_runnable


def test_same_priority_blocks_combine(loader: Loader) -> None:
    loader.add_block(
        [
            DefineSubtool("greet", body=[SetDescription("first")]),
            DefineSubtool("greet", body=[AddFlag(FlagSpec("loud")), SetExecutor(_noop)]),
        ],
    )

    tool = loader.lookup(["greet"]).tool

    assert tool.desc == "first"
    assert "loud" in {flag.key for flag in tool.flags}
    assert tool.is_runnable


def test_lower_priority_descendants_are_still_consulted(loader: Loader) -> None:
    def high(t: ToolDsl) -> None:
        @t.tool("ns")
        def ns(t: ToolDsl) -> None:
            t.desc("from high")
            t.tool("a", [SetExecutor(_noop)])

    def low(t: ToolDsl) -> None:
        @t.tool("ns")
        def ns(t: ToolDsl) -> None:
            t.desc("from low")
            t.tool("b", [SetExecutor(_noop)])

    loader.add_block(high, high_priority=True)
    loader.add_block(low)

    assert loader.lookup(["ns", "b"]).tool.full_name == ("ns", "b")
    assert loader.lookup(["ns"]).tool.desc == "from high"
    names = [tool.simple_name for tool in loader.list_subtools(["ns"])]
    assert names == ["a", "b"]


def test_deferred_bodies_load_on_a_later_lookup(loader: Loader) -> None:
    def configure(t: ToolDsl) -> None:
        @t.tool("deep")
        def deep(t: ToolDsl) -> None:
            @t.tool("er")
            def deeper(t: ToolDsl) -> None:
                t.desc("deeper tool")
                t.run(_noop)

    loader.add_block(configure)
    assert loader.lookup(["other"]).tool.is_root
    assert loader.peek(("deep", "er")) is None

    tool = loader.lookup(["deep", "er"]).tool
    assert tool.desc == "deeper tool"


def test_dotted_subtool_names_create_placeholders() -> None:
    loader = Loader(extra_delimiters=".")
    loader.add_block([DefineSubtool("a.b.c", body=[SetExecutor(_noop)])])

    loader.lookup(["a", "b", "c"])

    assert loader.peek(("a",)) is not None
    assert loader.peek(("a", "b")) is not None
    assert loader.lookup(["a", "b"]).tool.is_group


def test_extra_delimiters_split_the_first_argument() -> None:
    loader = Loader(extra_delimiters=".:")
    loader.add_block([DefineSubtool("ns", body=[DefineSubtool("build", body=[SetExecutor(_noop)])])])

    result = loader.lookup(["ns:build", "a.b"])

    assert result.tool.full_name == ("ns", "build")
    assert result.args == ("a.b",)


def test_runnable_tool_with_subtools_in_the_same_source_is_rejected(loader: Loader) -> None:
    def configure(t: ToolDsl) -> None:
        @t.tool("x")
        def x(t: ToolDsl) -> None:
            t.run(_noop)
            t.tool("y", [SetExecutor(_noop)])

    loader.add_block(configure)

    with pytest.raises(ToolDefinitionError, match="Cannot define subtools"):
        loader.lookup(["x", "y"])


def test_executor_after_subtool_in_the_same_source_is_rejected(loader: Loader) -> None:
    def configure(t: ToolDsl) -> None:
        @t.tool("x")
        def x(t: ToolDsl) -> None:
            t.tool("y", [SetExecutor(_noop)])
            t.run(_noop)

    loader.add_block(configure)

    with pytest.raises(ToolDefinitionError, match="cannot be runnable"):
        loader.lookup(["x"])


def test_higher_priority_leaf_hides_lower_priority_subtools(loader: Loader) -> None:
    loader.add_block([DefineSubtool("x", body=[SetExecutor(_noop)])], high_priority=True)
    loader.add_block([DefineSubtool("x", body=[DefineSubtool("y", body=[SetExecutor(_noop)])])])

    result = loader.lookup(["x", "y"])

    assert result.tool.full_name == ("x",)
    assert result.tool.is_runnable
    assert result.args == ("y",)


def test_higher_priority_subtools_turn_lower_priority_leaf_into_group(loader: Loader) -> None:
    loader.add_block([DefineSubtool("x", body=[DefineSubtool("y", body=[SetExecutor(_noop)])])], high_priority=True)
    loader.add_block([DefineSubtool("x", body=[SetExecutor(_noop)])])

    assert loader.lookup(["x", "y"]).tool.full_name == ("x", "y")
    assert loader.lookup(["x"]).tool.is_group


def test_alias_lookup_returns_the_target(loader: Loader) -> None:
    def configure(t: ToolDsl) -> None:
        @t.tool("build")
        def build(t: ToolDsl) -> None:
            t.desc("Build it")
            t.run(_noop)

        t.alias_tool("b", "build")

    loader.add_block(configure)

    assert loader.lookup(["b"]).tool is loader.lookup(["build"]).tool
    alias = loader.lookup_specific(["b"])
    assert alias is not None and alias.is_alias


def test_alias_of_subtool_form(loader: Loader) -> None:
    loader.add_block(
        [
            DefineSubtool("build", body=[SetExecutor(_noop)]),
            DefineSubtool("b", alias_of="build"),
        ],
    )

    assert loader.lookup(["b", "arg"]) == (loader.lookup(["build"]).tool, ("arg",))


def test_alias_as_creates_sibling_alias(loader: Loader) -> None:
    def configure(t: ToolDsl) -> None:
        @t.tool("build")
        def build(t: ToolDsl) -> None:
            t.alias_as("bb")
            t.run(_noop)

    loader.add_block(configure)

    build = loader.lookup(["build"]).tool
    assert loader.lookup(["bb"]).tool is build


def test_alias_as_on_a_group_is_rejected(loader: Loader) -> None:
    def configure(t: ToolDsl) -> None:
        @t.tool("group")
        def group(t: ToolDsl) -> None:
            t.alias_as("g")
            t.tool("leaf", [SetExecutor(_noop)])

    loader.add_block(configure)

    with pytest.raises(ToolDefinitionError, match="cannot be aliased"):
        loader.lookup(["group"])


def test_alias_of_root_is_rejected(loader: Loader) -> None:
    loader.add_block(lambda t: t.alias_as("top"))

    with pytest.raises(ToolDefinitionError, match="root"):
        loader.lookup([])


def test_alias_cycle_is_reported_at_lookup(loader: Loader) -> None:
    def configure(t: ToolDsl) -> None:
        t.alias_tool("p", "q")
        t.alias_tool("q", "p")

    loader.add_block(configure)

    with pytest.raises(ToolDefinitionError, match="cycle"):
        loader.lookup(["p"])


def test_alias_to_missing_tool_is_reported(loader: Loader) -> None:
    loader.add_block(lambda t: t.alias_tool("p", "nowhere"))

    with pytest.raises(ToolDefinitionError, match="missing tool"):
        loader.lookup(["p"])


def test_list_subtools_sorted_and_hides_underscored_names(loader: Loader) -> None:
    def configure(t: ToolDsl) -> None:
        t.tool("zeta", [SetExecutor(_noop)])
        t.tool("alpha", [SetExecutor(_noop)])
        t.tool("_secret", [SetExecutor(_noop)])
        t.tool("group", [DefineSubtool("inner", body=[SetExecutor(_noop)])])
        t.alias_tool("a", "alpha")

    loader.add_block(configure)

    names = [tool.full_name for tool in loader.list_subtools([])]
    assert names == [("a",), ("alpha",), ("group",), ("zeta",)]
    everything = [tool.full_name for tool in loader.list_subtools([], recursive=True, include_hidden=True)]
    assert ("_secret",) in everything
    assert ("group", "inner") in everything
    assert loader.has_subtools(["group"])
    assert not loader.has_subtools(["alpha"])


def test_builder_closure_errors_are_wrapped(loader: Loader) -> None:
    def configure(t: ToolDsl) -> None:
        raise ValueError("boom")

    loader.add_block(configure, name="broken block")

    with pytest.raises(SourceLoadError, match="broken block") as info:
        loader.lookup([])
    assert isinstance(info.value.__cause__, ValueError)


def test_finished_tool_rejects_late_directives(loader: Loader) -> None:
    captured: list[ToolDsl] = []

    def configure(t: ToolDsl) -> None:
        @t.tool("a")
        def a(t: ToolDsl) -> None:
            captured.append(t)

    loader.add_block(configure)
    loader.lookup(["a"])

    with pytest.raises(ToolDefinitionError, match="finished"):
        captured[0].desc("too late")


def test_failed_source_does_not_block_other_sources(loader: Loader, tmp_path) -> None:
    broken = tmp_path / "broken.toml"
    broken.write_text("this is = = not toml", encoding="utf-8")
    loader.add_path(broken, high_priority=True)
    loader.add_block([DefineSubtool("ok", body=[SetExecutor(_noop)])])

    with pytest.raises(SourceLoadError, match="broken.toml"):
        loader.lookup(["ok"])
    assert loader.lookup(["ok"]).tool.full_name == ("ok",)


def test_missing_path_is_rejected() -> None:
    with pytest.raises(SourceLoadError, match="does not exist"):
        Loader().add_path("/definitely/not/here.toml")


def test_higher_priority_source_added_after_evaluation_still_wins(loader: Loader) -> None:
    loader.add_block(
        [DefineSubtool("greet", body=[SetDescription("low"), AddFlag(FlagSpec("loud")), SetExecutor(_noop)])],
    )
    assert loader.lookup(["greet"]).tool.desc == "low"

    loader.add_block([DefineSubtool("greet", body=[SetDescription("high"), SetExecutor(_noop)])], high_priority=True)
    tool = loader.lookup(["greet"]).tool

    assert tool.desc == "high"
    assert "loud" not in {flag.key for flag in tool.flags}


def test_equal_priority_definition_replaces_an_alias(loader: Loader) -> None:
    loader.add_block(
        [
            DefineSubtool("x", body=[SetDescription("X"), SetExecutor(_noop)]),
            AliasTool("y", "x"),
            DefineSubtool("y", body=[SetDescription("Y"), SetExecutor(_noop)]),
        ],
    )

    tool = loader.lookup(["y"]).tool

    assert tool.full_name == ("y",)
    assert tool.desc == "Y"
    assert not tool.is_alias


def test_higher_priority_definition_replaces_an_evaluated_alias(loader: Loader) -> None:
    loader.add_block([DefineSubtool("x", body=[SetExecutor(_noop)]), AliasTool("y", "x")])
    assert loader.lookup(["y"]).tool.full_name == ("x",)

    loader.add_block([DefineSubtool("y", body=[SetDescription("Y"), SetExecutor(_noop)])], high_priority=True)
    tool = loader.lookup(["y"]).tool

    assert tool.full_name == ("y",)
    assert tool.desc == "Y"


def test_partially_defined_tool_is_not_returned_after_an_error(loader: Loader) -> None:
    loader.add_block(
        [DefineSubtool("a", body=[SetExecutor(_noop), DefineSubtool("x", body=[SetExecutor(_noop)])])],
    )

    with pytest.raises(ToolDefinitionError, match="Cannot define subtools"):
        loader.lookup(["a"])
    with pytest.raises(ToolDefinitionError, match="incomplete after an earlier error") as info:
        loader.lookup(["a"])
    assert isinstance(info.value.__cause__, ToolDefinitionError)
    assert loader.list_subtools([]) == ()

    loader.add_block([DefineSubtool("a", body=[SetDescription("fixed"), SetExecutor(_noop)])], high_priority=True)

    assert loader.lookup(["a"]).tool.desc == "fixed"
