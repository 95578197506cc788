# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Fluent builder front end handed to configuration closures.

Example::

    def configure(t: ToolDsl) -> None:
        @t.tool("greet")
        def greet(t: ToolDsl) -> None:
            t.desc("Print a greeting")
            t.flag("shout", "-s", "--shout")
            t.optional_arg("name", default="world")

            @t.run
            def run(ctx) -> None:
                message = f"hello {ctx['name']}"
                print(message.upper() if ctx["shout"] else message)
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar, overload

from ..definition.executors import CommandExecutor, Executor, ImportedExecutor
from ..definition.model_params import ArgKind, ArgSpec, FlagSpec
from ..names import ToolName
from ..sources.model_source import RemoteRef
from .directives import (
    AddFlag,
    AddMixin,
    AddOptionalArg,
    AddRequiredArg,
    AliasAs,
    AliasTool,
    DefineSubtool,
    Directive,
    DirectiveBody,
    ExpandTemplate,
    Include,
    IncludeTarget,
    SetDescription,
    SetExecutor,
    SetLongDescription,
    SetRemainingArgs,
    UseMiddleware,
)

if TYPE_CHECKING:
    from ..definition.model_tool import ToolDefinition
    from ..middleware.base import Middleware
    from .builder import Builder

BodyT = TypeVar("BodyT", bound=Callable[..., object])
ExecutorT = TypeVar("ExecutorT", bound=Callable[..., object])


class ToolDsl:
    """Emit directives for the tool currently being defined.

    Every method applies its directive immediately through the bound
    builder, so nested ``tool`` bodies that are irrelevant to the current
    lookup are deferred rather than executed.
    """

    def __init__(self, builder: Builder) -> None:
        self._builder = builder

    @property
    def tool_name(self) -> ToolName:
        return self._builder.tool.full_name

    @property
    def current_tool(self) -> ToolDefinition:
        return self._builder.tool

    @property
    def priority(self) -> int:
        return self._builder.priority

    def apply(self, directive: Directive) -> ToolDsl:
        """Apply a raw directive and return ``self`` for chaining."""

        self._builder.apply(directive)
        return self

    # ------------------------------------------------------------------
    # structure

    @overload
    def tool(self, words: str | tuple[str, ...]) -> Callable[[BodyT], BodyT]: ...

    @overload
    def tool(
        self,
        words: str | tuple[str, ...],
        body: DirectiveBody | None = ...,
        *,
        alias_of: str | None = ...,
    ) -> ToolDsl | Callable[[BodyT], BodyT]: ...

    def tool(
        self,
        words: str | tuple[str, ...],
        body: DirectiveBody | None = None,
        *,
        alias_of: str | None = None,
    ) -> ToolDsl | Callable[[BodyT], BodyT]:
        """Define subtool ``words``.

        Used as ``t.tool("name", body)`` or ``t.tool("name", alias_of="other")``
        it applies immediately. Used bare, it returns a decorator for the body
        function.
        """

        if body is not None or alias_of is not None:
            return self.apply(DefineSubtool(words, body=body, alias_of=alias_of))

        def decorator(function: BodyT) -> BodyT:
            self.apply(DefineSubtool(words, body=function))
            return function

        return decorator

    def alias_tool(self, word: str, target: str | tuple[str, ...]) -> ToolDsl:
        return self.apply(AliasTool(word, target))

    def alias_as(self, word: str) -> ToolDsl:
        return self.apply(AliasAs(word))

    def include(self, target: IncludeTarget) -> ToolDsl:
        return self.apply(Include(target))

    def include_git(self, remote: str, *, commit: str = "HEAD", path: str = "") -> ToolDsl:
        return self.apply(Include(RemoteRef(remote=remote, commit=commit, path=path)))

    def expand(self, template: str | type, *args: object, **kwargs: object) -> ToolDsl:
        return self.apply(ExpandTemplate(template, args, kwargs))

    # ------------------------------------------------------------------
    # content

    def desc(self, text: str) -> ToolDsl:
        return self.apply(SetDescription(text))

    def long_desc(self, *lines: str) -> ToolDsl:
        return self.apply(SetLongDescription(tuple(lines)))

    def flag(
        self,
        key: str,
        *switches: str,
        default: object = None,
        desc: str = "",
        accept: object = None,
    ) -> ToolDsl:
        return self.apply(AddFlag(FlagSpec(key, tuple(switches), default=default, desc=desc, accept=accept)))

    def required_arg(
        self,
        key: str,
        *,
        desc: str = "",
        accept: object = None,
        display_name: str | None = None,
    ) -> ToolDsl:
        spec = ArgSpec(key, ArgKind.REQUIRED, desc=desc, accept=accept, display_name=display_name)
        return self.apply(AddRequiredArg(spec))

    def optional_arg(
        self,
        key: str,
        *,
        default: object = None,
        desc: str = "",
        accept: object = None,
        display_name: str | None = None,
    ) -> ToolDsl:
        spec = ArgSpec(key, ArgKind.OPTIONAL, default=default, desc=desc, accept=accept, display_name=display_name)
        return self.apply(AddOptionalArg(spec))

    def remaining_args(
        self,
        key: str,
        *,
        desc: str = "",
        accept: object = None,
        display_name: str | None = None,
    ) -> ToolDsl:
        spec = ArgSpec(key, ArgKind.REMAINING, default=(), desc=desc, accept=accept, display_name=display_name)
        return self.apply(SetRemainingArgs(spec))

    @overload
    def run(self, executor: None = None) -> Callable[[ExecutorT], ExecutorT]: ...

    @overload
    def run(self, executor: Executor | str) -> ToolDsl: ...

    def run(self, executor: Executor | str | None = None) -> ToolDsl | Callable[[ExecutorT], ExecutorT]:
        """Make the tool runnable.

        Accepts a callable, an ``"module:function"`` reference, or nothing to
        act as a decorator.
        """

        if isinstance(executor, str):
            return self.apply(SetExecutor(ImportedExecutor(executor)))
        if executor is not None:
            return self.apply(SetExecutor(executor))

        def decorator(function: ExecutorT) -> ExecutorT:
            self.apply(SetExecutor(function))
            return function

        return decorator

    def command(self, *argv: str, pass_args: str | None = None) -> ToolDsl:
        """Make the tool run ``argv`` as an external command."""

        return self.apply(SetExecutor(CommandExecutor(tuple(argv), pass_args=pass_args)))

    def mixin(self, mixin: object) -> ToolDsl:
        return self.apply(AddMixin(mixin))

    def middleware(self, *stack: str | Middleware) -> ToolDsl:
        return self.apply(UseMiddleware(tuple(stack)))

    def find_data(self, relative: str | Path) -> Path | None:
        """Return a data file visible from the source being evaluated."""

        return self._builder.source.find_data(relative)


__all__ = ["ToolDsl"]
