# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Closed set of directives understood by the builder.

Configuration documents, Python configuration files, templates, and the
fluent :class:`~pytoys.loader.dsl.ToolDsl` all reduce to these values.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, TypeAlias, runtime_checkable

from ..definition.executors import Executor
from ..definition.model_params import ArgKind, ArgSpec, FlagSpec
from ..errors import ToolDefinitionError
from ..sources.model_source import RemoteRef

if TYPE_CHECKING:
    from ..middleware.base import Middleware
    from .dsl import ToolDsl


@runtime_checkable
class DirectiveProvider(Protocol):
    """Object producing directives on demand, evaluated only when reached."""

    def directives(self) -> Sequence[Directive]:
        """Return the directives of the body."""
        ...


DirectiveBody: TypeAlias = "Sequence[Directive] | DirectiveProvider | Callable[[ToolDsl], object]"
IncludeTarget: TypeAlias = str | Path | RemoteRef


@dataclass(frozen=True, slots=True)
class DefineSubtool:
    """Define (or declare) a subtool of the current tool.

    Attributes:
        words: Name of the subtool relative to the current tool.
        body: Directives for the subtool, ``None`` to only declare it.
        alias_of: Relative name of a sibling to alias instead of a body.
    """

    words: str | tuple[str, ...]
    body: DirectiveBody | None = None
    alias_of: str | tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if self.body is not None and self.alias_of is not None:
            raise ToolDefinitionError(f"Subtool {self.words!r} cannot have both a body and an alias target")


@dataclass(frozen=True, slots=True)
class AliasTool:
    """Create child ``word`` of the current tool as an alias of ``target``."""

    word: str
    target: str | tuple[str, ...]


@dataclass(frozen=True, slots=True)
class AliasAs:
    """Create a sibling ``word`` aliasing the current tool."""

    word: str


@dataclass(frozen=True, slots=True)
class Include:
    """Mount a file, directory, or remote source at the current tool."""

    target: IncludeTarget


@dataclass(frozen=True, slots=True)
class SetDescription:
    text: str


@dataclass(frozen=True, slots=True)
class SetLongDescription:
    text: str | tuple[str, ...]


@dataclass(frozen=True, slots=True)
class AddFlag:
    spec: FlagSpec


@dataclass(frozen=True, slots=True)
class AddRequiredArg:
    spec: ArgSpec

    def __post_init__(self) -> None:
        _expect_kind(self.spec, ArgKind.REQUIRED)


@dataclass(frozen=True, slots=True)
class AddOptionalArg:
    spec: ArgSpec

    def __post_init__(self) -> None:
        _expect_kind(self.spec, ArgKind.OPTIONAL)


@dataclass(frozen=True, slots=True)
class SetRemainingArgs:
    spec: ArgSpec

    def __post_init__(self) -> None:
        _expect_kind(self.spec, ArgKind.REMAINING)


@dataclass(frozen=True, slots=True)
class SetExecutor:
    executor: Executor


@dataclass(frozen=True, slots=True)
class AddMixin:
    """Attach a mixin, given by registered name or as a class or instance."""

    mixin: object


@dataclass(frozen=True, slots=True)
class UseMiddleware:
    """Override the middleware stack for the current tool and its subtools."""

    stack: tuple[str | Middleware, ...]


@dataclass(frozen=True, slots=True)
class ExpandTemplate:
    """Instantiate a template and replay its directives on the current tool."""

    template: str | type
    args: tuple[object, ...] = ()
    kwargs: Mapping[str, object] = field(default_factory=dict)


Directive: TypeAlias = (
    DefineSubtool
    | AliasTool
    | AliasAs
    | Include
    | SetDescription
    | SetLongDescription
    | AddFlag
    | AddRequiredArg
    | AddOptionalArg
    | SetRemainingArgs
    | SetExecutor
    | AddMixin
    | UseMiddleware
    | ExpandTemplate
)

MUTATING_DIRECTIVES: tuple[type, ...] = (
    SetDescription,
    SetLongDescription,
    AddFlag,
    AddRequiredArg,
    AddOptionalArg,
    SetRemainingArgs,
    SetExecutor,
    AddMixin,
    UseMiddleware,
)


def _expect_kind(spec: ArgSpec, kind: ArgKind) -> None:
    if spec.kind is not kind:
        raise ToolDefinitionError(f"Argument {spec.key!r} must be declared as {kind.value}, not {spec.kind.value}")


__all__ = [
    "MUTATING_DIRECTIVES",
    "AddFlag",
    "AddMixin",
    "AddOptionalArg",
    "AddRequiredArg",
    "AliasAs",
    "AliasTool",
    "DefineSubtool",
    "Directive",
    "DirectiveBody",
    "DirectiveProvider",
    "ExpandTemplate",
    "Include",
    "IncludeTarget",
    "SetDescription",
    "SetExecutor",
    "SetLongDescription",
    "SetRemainingArgs",
    "UseMiddleware",
]
