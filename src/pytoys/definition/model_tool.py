# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Mutable tool definition nodes built by the loader."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import ToolDefinitionError, ToysError
from ..names import ToolName, display_name, is_hidden
from .executors import Executor
from .model_params import ArgKind, ArgSpec, FlagSpec

if TYPE_CHECKING:
    from ..middleware.base import Middleware
    from ..sources.model_source import ConfigSource


class ToolState(StrEnum):
    """Lifecycle states of a :class:`ToolDefinition`."""

    PLACEHOLDER = "placeholder"
    UNDER_CONSTRUCTION = "under_construction"
    FINISHED = "finished"


class ToolDefinition:
    """One named command node, either a runnable leaf or a group of subtools.

    Nodes are created as placeholders the first time any source mentions the
    name, claimed and populated by the highest priority source that defines
    them, and finished when that source's directive block completes.
    """

    def __init__(self, full_name: ToolName, *, parent: ToolDefinition | None = None) -> None:
        """Create a placeholder node.

        Args:
            full_name: Tuple of words naming the tool. Empty for the root.
            parent: Parent node, ``None`` for the root.
        """

        self._full_name = tuple(full_name)
        self._parent = parent
        self._state = ToolState.PLACEHOLDER
        self._open_blocks = 0
        self._configuring = False
        self._configured = False
        self._failure: ToysError | None = None
        self.definition_priority: int | None = None
        self.child_priority: int | None = None
        self._clear()

    def _clear(self) -> None:
        self._desc = ""
        self._long_desc = ""
        self._flags: list[FlagSpec] = []
        self._required_args: list[ArgSpec] = []
        self._optional_args: list[ArgSpec] = []
        self._remaining_arg: ArgSpec | None = None
        self._executor: Executor | None = None
        self._middleware: tuple[Middleware, ...] | None = None
        self._mixins: list[object] = []
        self._alias_target: ToolName | None = None
        self._source: ConfigSource | None = None
        self._configured = False

    # ------------------------------------------------------------------
    # identity

    @property
    def full_name(self) -> ToolName:
        return self._full_name

    @property
    def simple_name(self) -> str:
        return self._full_name[-1] if self._full_name else ""

    @property
    def display_name(self) -> str:
        return display_name(self._full_name)

    @property
    def parent(self) -> ToolDefinition | None:
        return self._parent

    @property
    def is_root(self) -> bool:
        return not self._full_name

    @property
    def hidden(self) -> bool:
        return is_hidden(self._full_name)

    # ------------------------------------------------------------------
    # state

    @property
    def state(self) -> ToolState:
        return self._state

    @property
    def finished(self) -> bool:
        return self._state is ToolState.FINISHED

    @property
    def is_placeholder(self) -> bool:
        return self.definition_priority is None

    @property
    def is_alias(self) -> bool:
        return self._alias_target is not None

    @property
    def is_runnable(self) -> bool:
        return self._executor is not None

    @property
    def is_group(self) -> bool:
        return not self.is_runnable and not self.is_alias

    def note_child(self, priority: int) -> None:
        """Record that a source at ``priority`` mentioned a subtool of this node."""

        if self.child_priority is None or priority > self.child_priority:
            self.child_priority = priority

    def accepts_priority(self, priority: int) -> bool:
        """Return ``True`` when a source at ``priority`` may modify this node."""

        return self.definition_priority is None or priority >= self.definition_priority

    def begin_block(self, priority: int) -> bool:
        """Open a directive block at ``priority``.

        Args:
            priority: Priority of the source evaluating the block.

        Returns:
            bool: ``True`` when the block may mutate the node. Lower priority
            blocks observe the node without changing it. A block at or above
            the priority of an alias replaces the alias.
        """

        if not self.accepts_priority(priority):
            return False
        if self.is_alias:
            self._clear()
            self.definition_priority = priority
        self._open_blocks += 1
        self._state = ToolState.UNDER_CONSTRUCTION
        return True

    def end_block(self) -> None:
        """Close a block opened with :meth:`begin_block`."""

        self._open_blocks = max(0, self._open_blocks - 1)
        if self._open_blocks == 0:
            self._state = ToolState.FINISHED

    def claim(self, priority: int, source: ConfigSource | None) -> None:
        """Record ``source`` as the definer of this node at ``priority``.

        A claim from a strictly higher priority than the current definition
        discards everything the previous definer set, including a recorded
        failure.
        """

        self._check_mutable()
        if self.definition_priority is not None and priority > self.definition_priority:
            self._clear()
            self._failure = None
        self.definition_priority = priority
        if source is not None:
            self._source = source

    def mark_failed(self, error: ToysError) -> None:
        """Record that ``error`` interrupted a block while it defined this node."""

        if self._failure is None:
            self._failure = error

    @property
    def failure(self) -> ToysError | None:
        """Error that left this node partially defined, if any."""

        return self._failure

    def finish(self) -> None:
        """Finish a placeholder or abandoned node without any open block."""

        if self._open_blocks == 0:
            self._state = ToolState.FINISHED

    def make_alias(self, target: ToolName, priority: int, source: ConfigSource | None = None) -> bool:
        """Turn this node into an alias of ``target``.

        Args:
            target: Absolute name of the aliased tool.
            priority: Priority of the defining source.
            source: Defining source.

        Returns:
            bool: ``False`` when a higher priority definition already owns the node.

        Raises:
            ToolDefinitionError: If the node is being built by another block.
        """

        if not self.accepts_priority(priority):
            return False
        if self._state is ToolState.UNDER_CONSTRUCTION:
            raise ToolDefinitionError(f"Tool {self.display_name!r} is already being defined and cannot become an alias")
        self._clear()
        self._alias_target = tuple(target)
        self.definition_priority = priority
        self._source = source
        self._state = ToolState.FINISHED
        return True

    @contextmanager
    def configuring(self) -> Iterator[None]:
        """Allow middleware configuration hooks to mutate a finished node once."""

        self._configuring = True
        try:
            yield
        finally:
            self._configuring = False
            self._configured = True

    @property
    def configured(self) -> bool:
        return self._configured

    def _check_mutable(self) -> None:
        if self._state is not ToolState.UNDER_CONSTRUCTION and not self._configuring:
            raise ToolDefinitionError(f"Tool {self.display_name!r} is finished and can no longer be modified")

    # ------------------------------------------------------------------
    # content

    @property
    def desc(self) -> str:
        return self._desc

    @property
    def long_desc(self) -> str:
        return self._long_desc

    @property
    def flags(self) -> tuple[FlagSpec, ...]:
        return tuple(self._flags)

    @property
    def required_args(self) -> tuple[ArgSpec, ...]:
        return tuple(self._required_args)

    @property
    def optional_args(self) -> tuple[ArgSpec, ...]:
        return tuple(self._optional_args)

    @property
    def remaining_arg(self) -> ArgSpec | None:
        return self._remaining_arg

    @property
    def positional_args(self) -> tuple[ArgSpec, ...]:
        tail = (self._remaining_arg,) if self._remaining_arg is not None else ()
        return (*self._required_args, *self._optional_args, *tail)

    @property
    def executor(self) -> Executor | None:
        return self._executor

    @property
    def mixins(self) -> tuple[object, ...]:
        return tuple(self._mixins)

    @property
    def alias_target(self) -> ToolName | None:
        return self._alias_target

    @property
    def source(self) -> ConfigSource | None:
        return self._source

    @property
    def middleware(self) -> tuple[Middleware, ...] | None:
        """Return the effective middleware stack, inherited from ancestors."""

        node: ToolDefinition | None = self
        while node is not None:
            if node._middleware is not None:
                return node._middleware
            node = node._parent
        return None

    @property
    def used_keys(self) -> frozenset[str]:
        return frozenset(spec.canonical_name for spec in (*self._flags, *self.positional_args))

    def set_desc(self, text: str) -> None:
        self._check_mutable()
        self._desc = text

    def set_long_desc(self, text: str | Sequence[str]) -> None:
        self._check_mutable()
        self._long_desc = text if isinstance(text, str) else "\n".join(text)

    def add_flag(self, spec: FlagSpec) -> None:
        """Append ``spec`` after checking key and switch uniqueness.

        Raises:
            ToolDefinitionError: If the key or any switch is already in use.
        """

        self._check_mutable()
        if spec.canonical_name in self.used_keys:
            raise ToolDefinitionError(f"Key {spec.key!r} is already used in tool {self.display_name!r}")
        taken = {option for flag in self._flags for option in flag.option_strings}
        clashes = sorted(taken.intersection(spec.option_strings))
        if clashes:
            raise ToolDefinitionError(
                f"Flag {spec.key!r} reuses switch(es) {', '.join(clashes)} in tool {self.display_name!r}",
            )
        self._flags.append(spec)

    def add_arg(self, spec: ArgSpec) -> None:
        """Add a positional argument honouring required, optional, remaining ordering.

        Raises:
            ToolDefinitionError: If the key is in use or the ordering is violated.
        """

        self._check_mutable()
        if spec.canonical_name in self.used_keys:
            raise ToolDefinitionError(f"Key {spec.key!r} is already used in tool {self.display_name!r}")
        if spec.kind is ArgKind.REQUIRED:
            if self._optional_args or self._remaining_arg is not None:
                raise ToolDefinitionError(
                    f"Required arg {spec.key!r} must precede optional args in tool {self.display_name!r}",
                )
            self._required_args.append(spec)
        elif spec.kind is ArgKind.OPTIONAL:
            if self._remaining_arg is not None:
                raise ToolDefinitionError(
                    f"Optional arg {spec.key!r} must precede remaining args in tool {self.display_name!r}",
                )
            self._optional_args.append(spec)
        else:
            if self._remaining_arg is not None:
                raise ToolDefinitionError(f"Remaining args already set for tool {self.display_name!r}")
            self._remaining_arg = spec

    def set_executor(self, executor: Executor) -> None:
        self._check_mutable()
        if not callable(executor):
            raise ToolDefinitionError(f"Executor for tool {self.display_name!r} must be callable")
        self._executor = executor

    def add_mixin(self, mixin: object) -> None:
        self._check_mutable()
        if mixin not in self._mixins:
            self._mixins.append(mixin)

    def set_middleware(self, stack: Sequence[Middleware]) -> None:
        self._check_mutable()
        self._middleware = tuple(stack)

    def find_data(self, relative: str | Path) -> Path | None:
        """Return the first data file matching ``relative`` along the source chain."""

        source = self._source
        return source.find_data(relative) if source is not None else None

    def __repr__(self) -> str:
        return f"ToolDefinition({self.display_name!r}, state={self._state.value})"


__all__ = ["ToolDefinition", "ToolState"]
