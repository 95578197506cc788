# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tool name helpers shared by the loader, builder, and sources."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import Final, TypeAlias

from .errors import ToolDefinitionError

ToolName: TypeAlias = tuple[str, ...]

ROOT_NAME: Final[ToolName] = ()
ALLOWED_DELIMITERS: Final[frozenset[str]] = frozenset({".", ":", "/"})
HIDDEN_PREFIX: Final[str] = "_"


def validate_delimiters(delimiters: str) -> str:
    """Return ``delimiters`` after checking each character is supported.

    Args:
        delimiters: Extra characters accepted as tool name separators.

    Returns:
        str: The validated delimiter string.

    Raises:
        ToolDefinitionError: If an unsupported delimiter is supplied.
    """

    unknown = sorted(set(delimiters) - ALLOWED_DELIMITERS)
    if unknown:
        raise ToolDefinitionError(f"Unsupported tool name delimiter(s): {''.join(unknown)!r}")
    return delimiters


def _split_pattern(delimiters: str) -> re.Pattern[str]:
    escaped = "".join(re.escape(char) for char in delimiters)
    return re.compile(rf"[\s{escaped}]+") if escaped else re.compile(r"\s+")


def split_path(value: str | Sequence[str], delimiters: str = "") -> ToolName:
    """Normalise a tool name given as a string or a sequence of words.

    Strings are split on whitespace and on ``delimiters``. Sequences are
    flattened the same way so ``["a", "b.c"]`` and ``"a b c"`` agree.

    Args:
        value: Name to normalise.
        delimiters: Extra separator characters.

    Returns:
        ToolName: Tuple of non-empty words.
    """

    pattern = _split_pattern(delimiters)
    if isinstance(value, str):
        parts: Iterable[str] = (value,)
    else:
        parts = value
    words: list[str] = []
    for part in parts:
        words.extend(word for word in pattern.split(str(part)) if word)
    return tuple(words)


def split_first_arg(args: Sequence[str], delimiters: str) -> list[str]:
    """Split only the first command-line argument on ``delimiters``.

    Args:
        args: Raw command-line arguments.
        delimiters: Extra separator characters configured on the loader.

    Returns:
        list[str]: Arguments with the first entry expanded when it is a
        delimited tool name.
    """

    remaining = list(args)
    if not delimiters or not remaining or remaining[0].startswith("-"):
        return remaining
    escaped = "".join(re.escape(char) for char in delimiters)
    head = [word for word in re.split(rf"[{escaped}]+", remaining[0]) if word]
    return [*head, *remaining[1:]] if head else remaining


def next_remaining_words(remaining: ToolName | None, word: str) -> ToolName | None:
    """Return the remaining words scope after descending into ``word``.

    ``None`` means the subtree is irrelevant to the current lookup and an
    empty tuple means everything below is relevant.

    Args:
        remaining: Current remaining words scope.
        word: Name of the child being entered.

    Returns:
        ToolName | None: The child's scope.
    """

    if remaining is None:
        return None
    if not remaining:
        return ROOT_NAME
    if remaining[0] == word:
        return remaining[1:]
    return None


def calc_remaining_words(prefix: ToolName, words: ToolName) -> ToolName | None:
    """Return the remaining words for a source at ``words`` loading ``prefix``.

    Args:
        prefix: Name being loaded.
        words: Name at which the source is mounted.

    Returns:
        ToolName | None: ``None`` when the source is unrelated to ``prefix``,
        otherwise the portion of ``prefix`` below ``words`` (empty when the
        source lies at or under ``prefix``).
    """

    shared = min(len(prefix), len(words))
    if prefix[:shared] != words[:shared]:
        return None
    return prefix[len(words) :] if len(words) <= len(prefix) else ROOT_NAME


def is_hidden(name: ToolName) -> bool:
    return any(word.startswith(HIDDEN_PREFIX) for word in name)


def display_name(name: ToolName) -> str:
    """Return the space separated display form of ``name``."""

    return " ".join(name) if name else "(root)"


__all__ = [
    "ALLOWED_DELIMITERS",
    "ROOT_NAME",
    "ToolName",
    "calc_remaining_words",
    "display_name",
    "is_hidden",
    "next_remaining_words",
    "split_first_arg",
    "split_path",
    "validate_delimiters",
]
