# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Mapping between tool name segments and directory entries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Protocol, runtime_checkable

CONFIG_SUFFIXES: Final[tuple[str, ...]] = (".toml", ".json", ".py")


@runtime_checkable
class NamingConvention(Protocol):
    """Translate tool name segments into file stems and back."""

    suffixes: tuple[str, ...]

    def segment_to_filename(self, word: str) -> str:
        """Return the file stem (or directory name) for ``word``."""
        ...

    def filename_to_segment(self, filename: str) -> str | None:
        """Return the segment for a file stem, or ``None`` if it is not a tool name."""
        ...


@dataclass(frozen=True, slots=True)
class DefaultNaming:
    """Identity convention: ``deploy.toml`` and ``deploy/`` both define ``deploy``."""

    suffixes: tuple[str, ...] = CONFIG_SUFFIXES

    def segment_to_filename(self, word: str) -> str:
        return word

    def filename_to_segment(self, filename: str) -> str | None:
        return filename or None


@dataclass(frozen=True, slots=True)
class SnakeCaseNaming:
    """Convention storing ``foo-bar`` as ``foo_bar.py`` so files stay importable."""

    suffixes: tuple[str, ...] = CONFIG_SUFFIXES

    def segment_to_filename(self, word: str) -> str:
        return word.replace("-", "_")

    def filename_to_segment(self, filename: str) -> str | None:
        return filename.replace("_", "-") or None


def candidate_entries(naming: NamingConvention, word: str) -> tuple[str, ...]:
    """Return the directory entry names that could define ``word``.

    Files are listed in suffix order, followed by the bare stem for a
    subdirectory.
    """

    stem = naming.segment_to_filename(word)
    return (*(f"{stem}{suffix}" for suffix in naming.suffixes), stem)


def split_entry(naming: NamingConvention, entry: str, *, is_dir: bool) -> str | None:
    """Return the tool segment defined by a directory entry, if any.

    Args:
        naming: Naming convention in use.
        entry: Entry name inside the directory.
        is_dir: Whether the entry is a directory.

    Returns:
        str | None: Segment, or ``None`` for entries that are not tool sources.
    """

    if is_dir:
        return naming.filename_to_segment(entry)
    for suffix in naming.suffixes:
        if entry.endswith(suffix):
            return naming.filename_to_segment(entry[: -len(suffix)])
    return None


__all__ = [
    "CONFIG_SUFFIXES",
    "DefaultNaming",
    "NamingConvention",
    "SnakeCaseNaming",
    "candidate_entries",
    "split_entry",
]
