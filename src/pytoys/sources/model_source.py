# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Configuration source descriptors consumed by the loader."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from ..names import ROOT_NAME, ToolName, display_name

if TYPE_CHECKING:
    from ..loader.directives import DirectiveBody


class SourceKind(StrEnum):
    """Enumerate configuration source variants."""

    BLOCK = "block"
    FILE = "file"
    DIRECTORY = "directory"
    REMOTE = "remote"


@dataclass(frozen=True, slots=True)
class RemoteRef:
    """Reference to a path inside a remote git repository.

    Attributes:
        remote: Clone URL or local path of the repository.
        commit: Branch, tag, or commit SHA to materialise.
        path: Path inside the repository, empty for the repository root.
    """

    remote: str
    commit: str = "HEAD"
    path: str = ""

    def describe(self) -> str:
        suffix = f"/{self.path}" if self.path else ""
        return f"git:{self.remote}@{self.commit}{suffix}"


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class ConfigSource:
    """Common attributes of every configuration source.

    Sources compare by identity so the same file registered twice remains two
    independent pending entries.

    Attributes:
        priority: Priority at which definitions from this source apply.
        path_prefix: Tool name at which the source is mounted.
        parent: Source that included or contained this one.
        name: Optional display name overriding :meth:`describe`.
        data_dir: Data directory attached to this source.
    """

    kind: ClassVar[SourceKind]

    priority: int
    path_prefix: ToolName = ROOT_NAME
    parent: ConfigSource | None = None
    name: str | None = None
    data_dir: Path | None = None

    def describe(self) -> str:
        return f"{self.kind.value} at {display_name(self.path_prefix)}"

    @property
    def display(self) -> str:
        return self.name or self.describe()

    @property
    def context_directory(self) -> Path | None:
        """Return the directory used to resolve relative includes."""

        return self.parent.context_directory if self.parent is not None else None

    def find_data(self, relative: str | Path) -> Path | None:
        """Return the first existing data path for ``relative`` along the parent chain.

        Args:
            relative: Path relative to a data directory.

        Returns:
            Path | None: Matching path, or ``None`` when no data directory has it.
        """

        source: ConfigSource | None = self
        while source is not None:
            if source.data_dir is not None:
                candidate = source.data_dir / relative
                if candidate.exists():
                    return candidate
            source = source.parent
        return None


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class BlockSource(ConfigSource):
    """In-memory directive body, either registered directly or deferred by a builder."""

    kind: ClassVar[SourceKind] = SourceKind.BLOCK

    body: DirectiveBody

    def describe(self) -> str:
        origin = f" from {self.parent.display}" if self.parent is not None else ""
        return f"block at {display_name(self.path_prefix)}{origin}"


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class FileSource(ConfigSource):
    """Configuration file (TOML, JSON, or Python)."""

    kind: ClassVar[SourceKind] = SourceKind.FILE

    path: Path

    def describe(self) -> str:
        return str(self.path)

    @property
    def context_directory(self) -> Path | None:
        return self.path.parent


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class DirectorySource(ConfigSource):
    """Directory whose entries map onto subtools through a naming convention."""

    kind: ClassVar[SourceKind] = SourceKind.DIRECTORY

    path: Path

    def describe(self) -> str:
        return f"{self.path}/"

    @property
    def context_directory(self) -> Path | None:
        return self.path


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class RemoteSource(ConfigSource):
    """File or directory inside a remote git repository."""

    kind: ClassVar[SourceKind] = SourceKind.REMOTE

    ref: RemoteRef

    def describe(self) -> str:
        return self.ref.describe()


__all__ = [
    "BlockSource",
    "ConfigSource",
    "DirectorySource",
    "FileSource",
    "RemoteRef",
    "RemoteSource",
    "SourceKind",
]
