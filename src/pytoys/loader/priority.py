# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Priority ordered registry of configuration sources awaiting evaluation."""

from __future__ import annotations

import itertools
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from ..names import ToolName, calc_remaining_words
from ..sources.model_source import ConfigSource

DEFAULT_PRIORITY_STEP = 1


@dataclass(slots=True)
class PendingSource:
    """A source mounted at ``words`` that has not been fully evaluated.

    Attributes:
        source: Source to evaluate.
        words: Tool name at which the source applies.
        priority: Priority at which its definitions apply.
        sequence: Registration order, used to break priority ties.
        probed: Child segments already loaded from a directory source.
        index_loaded: Whether a directory's index and preload files ran.
        owner: Identifier of the thread evaluating the entry, if any.
    """

    source: ConfigSource
    words: ToolName
    priority: int
    sequence: int
    probed: set[str] = field(default_factory=set)
    index_loaded: bool = False
    owner: int | None = None

    @property
    def sort_key(self) -> tuple[int, int]:
        return (-self.priority, self.sequence)


@dataclass(slots=True)
class RelevantSource:
    """A pending entry paired with its remaining words for one load pass."""

    entry: PendingSource
    remaining: ToolName


class PriorityIndex:
    """Keep pending sources and hand out those relevant to a tool name.

    Root sources added with high priority receive increasing priorities and
    those added with low priority receive decreasing ones, so the most
    recently added source wins within each group.
    """

    def __init__(self) -> None:
        self._pending: list[PendingSource] = []
        self._checked_out: dict[int, PendingSource] = {}
        self._counter = itertools.count()
        self._max_priority = 0
        self._min_priority = 0

    def allocate(self, *, high_priority: bool) -> int:
        """Return the priority for a new root source.

        Args:
            high_priority: Whether the source outranks all previous ones.

        Returns:
            int: Newly allocated priority.
        """

        if high_priority:
            self._max_priority += DEFAULT_PRIORITY_STEP
            return self._max_priority
        self._min_priority -= DEFAULT_PRIORITY_STEP
        return self._min_priority

    def new_entry(self, source: ConfigSource, words: ToolName, priority: int) -> PendingSource:
        """Create an entry for a source evaluated immediately rather than queued."""

        return PendingSource(source=source, words=tuple(words), priority=priority, sequence=next(self._counter))

    def register(self, source: ConfigSource, words: ToolName, priority: int) -> PendingSource:
        entry = self.new_entry(source, words, priority)
        self._pending.append(entry)
        return entry

    def requeue(self, entry: PendingSource) -> None:
        """Return a partially evaluated entry to the index keeping its order."""

        self._pending.append(entry)

    def take_relevant(self, prefix: ToolName) -> list[RelevantSource]:
        """Remove and return entries relevant to ``prefix`` in evaluation order.

        Args:
            prefix: Tool name being loaded.

        Returns:
            list[RelevantSource]: Entries sorted by descending priority, then
            registration order.
        """

        relevant: list[RelevantSource] = []
        kept: list[PendingSource] = []
        for entry in self._pending:
            remaining = calc_remaining_words(prefix, entry.words)
            if remaining is None:
                kept.append(entry)
            else:
                relevant.append(RelevantSource(entry=entry, remaining=remaining))
        self._pending = kept
        relevant.sort(key=lambda item: item.entry.sort_key)
        return relevant

    def check_out(self, entries: Iterable[PendingSource], owner: int) -> None:
        """Mark ``entries`` as being evaluated by the thread ``owner``."""

        for entry in entries:
            entry.owner = owner
            self._checked_out[entry.sequence] = entry

    def check_in(self, entries: Iterable[PendingSource]) -> None:
        """Release entries previously passed to :meth:`check_out`."""

        for entry in entries:
            entry.owner = None
            self._checked_out.pop(entry.sequence, None)

    def busy(self, prefix: ToolName, owner: int) -> bool:
        """Return ``True`` when another thread evaluates an entry relevant to ``prefix``."""

        return any(
            entry.owner != owner and calc_remaining_words(prefix, entry.words) is not None
            for entry in self._checked_out.values()
        )

    def __len__(self) -> int:
        return len(self._pending)

    def __iter__(self) -> Iterator[PendingSource]:
        return iter(sorted(self._pending, key=lambda entry: entry.sort_key))


__all__ = ["PendingSource", "PriorityIndex", "RelevantSource"]
