# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Lazy tool lookup over prioritised configuration sources."""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final, NamedTuple, cast

from ..definition.model_tool import ToolDefinition
from ..errors import SourceLoadError, ToolDefinitionError
from ..middleware.base import Middleware
from ..middleware.registry import MiddlewareRegistry
from ..mixins.registry import MixinRegistry
from ..names import (
    ROOT_NAME,
    ToolName,
    display_name,
    is_hidden,
    split_first_arg,
    split_path,
    validate_delimiters,
)
from ..sources.documents import DOCUMENT_SUFFIXES, load_document_body
from ..sources.git_cache import RemoteFetcher
from ..sources.model_source import (
    BlockSource,
    ConfigSource,
    DirectorySource,
    FileSource,
    RemoteRef,
    RemoteSource,
)
from ..sources.naming import DefaultNaming, NamingConvention, candidate_entries, split_entry
from ..sources.pyfile import import_config_module, load_python_body
from ..templates.registry import TemplateRegistry
from .builder import Builder
from .directives import DirectiveBody, IncludeTarget
from .priority import PendingSource, PriorityIndex

LOGGER = logging.getLogger(__name__)

DEFAULT_INDEX_STEM: Final[str] = ".toys"
DEFAULT_PRELOAD_FILE: Final[str] = ".preload.py"
DEFAULT_DATA_DIR: Final[str] = ".data"
PYTHON_SUFFIX: Final[str] = ".py"
IGNORED_ENTRIES: Final[frozenset[str]] = frozenset({"__pycache__"})


@dataclass(frozen=True, slots=True)
class ToolSlot:
    """Result of :meth:`Loader.get_or_create`.

    Attributes:
        tool: The (possibly new placeholder) definition for the name.
        writable: Whether a source at the requested priority may modify it.
    """

    tool: ToolDefinition
    writable: bool


class LookupResult(NamedTuple):
    """Tool found for a command line plus the arguments left for it."""

    tool: ToolDefinition
    args: tuple[str, ...]


class Loader:
    """Resolve command paths against configuration sources, loading lazily.

    Sources are registered with :meth:`add_path`, :meth:`add_block` and
    :meth:`add_remote`. Nothing is read until a lookup needs it: each
    lookup evaluates only the pending sources whose mount point lies on the
    requested path, in descending priority order, and leaves the rest for
    later. Each pending source is evaluated by one thread at a time; lookups
    of unrelated subtrees load in parallel.
    """

    def __init__(
        self,
        *,
        index_file_stem: str | None = DEFAULT_INDEX_STEM,
        preload_file_name: str | None = DEFAULT_PRELOAD_FILE,
        data_dir_name: str | None = DEFAULT_DATA_DIR,
        extra_delimiters: str = "",
        naming: NamingConvention | None = None,
        fetcher: RemoteFetcher | None = None,
        middleware_stack: Sequence[str | Middleware | type] | None = None,
        middleware: MiddlewareRegistry | None = None,
        mixins: MixinRegistry | None = None,
        templates: TemplateRegistry | None = None,
    ) -> None:
        """Create an empty loader.

        Args:
            index_file_stem: Stem of the file configuring a directory's own tool.
            preload_file_name: Python file imported before a directory's tools.
            data_dir_name: Name of data directories attached to directory sources.
            extra_delimiters: Characters besides whitespace that separate words.
            naming: Convention mapping words onto directory entries.
            fetcher: Materialiser for remote sources.
            middleware_stack: Default middleware for tools that set none.
            middleware: Middleware registry used to resolve names.
            mixins: Mixin registry used to resolve names.
            templates: Template registry used to resolve names.
        """

        self.index_file_stem = index_file_stem
        self.preload_file_name = preload_file_name
        self.data_dir_name = data_dir_name
        self.extra_delimiters = validate_delimiters(extra_delimiters)
        self.naming: NamingConvention = naming or DefaultNaming()
        self.fetcher = fetcher
        self.middleware = middleware or MiddlewareRegistry()
        self.mixins = mixins or MixinRegistry()
        self.templates = templates or TemplateRegistry()
        self.default_middleware: tuple[Middleware, ...] = (
            self.middleware.default_stack()
            if middleware_stack is None
            else self.middleware.resolve_stack(middleware_stack)
        )
        self._lock = threading.RLock()
        self._idle = threading.Condition(self._lock)
        self._index = PriorityIndex()
        self._tools: dict[ToolName, ToolDefinition] = {ROOT_NAME: ToolDefinition(ROOT_NAME)}
        self._loaded_paths: list[Path] = []
        self._block_names = itertools.count(1)

    # ------------------------------------------------------------------
    # registration

    def add_path(
        self,
        paths: str | Path | Sequence[str | Path],
        *,
        high_priority: bool = False,
        name: str | None = None,
    ) -> Loader:
        """Register configuration files or directories at the root.

        All paths of one call share a priority. Without ``high_priority`` the
        paths rank below every source added so far; with it they rank above.

        Raises:
            SourceLoadError: If a path does not exist.
        """

        entries = [paths] if isinstance(paths, (str, Path)) else list(paths)
        with self._lock:
            priority = self._index.allocate(high_priority=high_priority)
            for entry in entries:
                path = Path(entry)
                source = self._source_for_path(path, words=ROOT_NAME, priority=priority, parent=None, name=name)
                if source is None:
                    raise SourceLoadError("path does not exist", source=str(path))
                self._index.register(source, ROOT_NAME, priority)
        return self

    def add_block(
        self,
        body: DirectiveBody,
        *,
        high_priority: bool = False,
        name: str | None = None,
    ) -> Loader:
        """Register an in-memory directive body or builder closure at the root."""

        with self._lock:
            priority = self._index.allocate(high_priority=high_priority)
            label = name or f"block #{next(self._block_names)}"
            source = BlockSource(priority=priority, body=body, name=label)
            self._index.register(source, ROOT_NAME, priority)
        return self

    def add_remote(
        self,
        remote: str,
        *,
        commit: str = "HEAD",
        path: str = "",
        high_priority: bool = False,
    ) -> Loader:
        """Register a file or directory inside a remote git repository at the root."""

        with self._lock:
            priority = self._index.allocate(high_priority=high_priority)
            ref = RemoteRef(remote=remote, commit=commit, path=path)
            self._index.register(RemoteSource(priority=priority, ref=ref), ROOT_NAME, priority)
        return self

    # ------------------------------------------------------------------
    # lookup

    def split_path(self, value: str | Sequence[str]) -> ToolName:
        return split_path(value, self.extra_delimiters)

    def lookup(self, args: Sequence[str]) -> LookupResult:
        """Find the tool named by the leading words of ``args``.

        Words are taken up to the first argument starting with ``-``. The
        longest defined prefix wins, falling back to the root. Aliases are
        resolved.

        Args:
            args: Command-line arguments after the executable name.

        Returns:
            LookupResult: The tool and the arguments that follow its name.

        Raises:
            ToolDefinitionError: If an alias is cyclic or points nowhere.
            SourceLoadError: If a relevant source cannot be loaded.
        """

        expanded = split_first_arg(args, self.extra_delimiters)
        prefix: ToolName = tuple(itertools.takewhile(lambda arg: not arg.startswith("-"), expanded))
        while True:
            tool = self.lookup_specific(prefix)
            if tool is not None:
                return LookupResult(self.resolve_alias(tool), tuple(expanded[len(prefix) :]))
            prefix = prefix[:-1]

    def lookup_specific(self, words: Sequence[str]) -> ToolDefinition | None:
        """Return the exact node for ``words`` without resolving aliases.

        Loads every pending source relevant to ``words`` first.

        Raises:
            ToolDefinitionError: If an earlier error left the node partially defined.
        """

        name = tuple(words)
        self._load_for_prefix(name)
        with self._lock:
            self._finish_subtree(name)
            tool = self._tools.get(name)
        if tool is not None and tool.failure is not None:
            raise ToolDefinitionError(
                f"Tool {tool.display_name!r} is incomplete after an earlier error: {tool.failure}",
            ) from tool.failure
        return tool

    def resolve_alias(self, tool: ToolDefinition) -> ToolDefinition:
        """Follow alias targets from ``tool`` to a concrete tool.

        Raises:
            ToolDefinitionError: If the chain loops or a target is missing.
        """

        chain = [tool.full_name]
        current = tool
        while current.alias_target is not None:
            target_name = current.alias_target
            if target_name in chain:
                cycle = " -> ".join(display_name(name) for name in (*chain, target_name))
                raise ToolDefinitionError(f"Alias cycle detected: {cycle}")
            chain.append(target_name)
            target = self.lookup_specific(target_name)
            if target is None:
                raise ToolDefinitionError(
                    f"Alias {current.display_name!r} points to missing tool {display_name(target_name)!r}",
                )
            current = target
        return current

    def list_subtools(
        self,
        words: Sequence[str],
        *,
        recursive: bool = False,
        include_hidden: bool = False,
    ) -> tuple[ToolDefinition, ...]:
        """Return finished subtools of ``words`` sorted by name.

        Aliases are returned as alias nodes and are not expanded.

        Args:
            words: Name of the parent tool.
            recursive: Include all descendants instead of direct children.
            include_hidden: Include tools whose relative name has a segment
                starting with an underscore.

        Returns:
            tuple[ToolDefinition, ...]: Matching tools.
        """

        parent = tuple(words)
        depth = len(parent)
        self._load_for_prefix(parent)
        with self._lock:
            self._finish_subtree(parent)
            found = [
                tool
                for name, tool in self._tools.items()
                if len(name) > depth
                and name[:depth] == parent
                and (recursive or len(name) == depth + 1)
                and tool.finished
                and tool.failure is None
                and (include_hidden or not is_hidden(name[depth:]))
            ]
        return tuple(sorted(found, key=lambda tool: tool.full_name))

    def has_subtools(self, words: Sequence[str]) -> bool:
        return bool(self.list_subtools(words, include_hidden=True))

    def peek(self, name: ToolName) -> ToolDefinition | None:
        """Return the node for ``name`` if it exists, without loading anything."""

        with self._lock:
            return self._tools.get(tuple(name))

    def get_or_create(self, name: Sequence[str], priority: int) -> ToolSlot:
        """Return the node for ``name``, creating placeholders along the way.

        Args:
            name: Full tool name.
            priority: Priority of the source asking for the node.

        Returns:
            ToolSlot: The node and whether ``priority`` may modify it.
        """

        key = tuple(name)
        with self._lock:
            tool = self._tools.get(key)
            if tool is None:
                parent = self.get_or_create(key[:-1], priority).tool
                tool = ToolDefinition(key, parent=parent)
                self._tools[key] = tool
            if key:
                self._tools[key[:-1]].note_child(priority)
            return ToolSlot(tool, tool.accepts_priority(priority))

    def effective_middleware(self, tool: ToolDefinition) -> tuple[Middleware, ...]:
        stack = tool.middleware
        return stack if stack is not None else self.default_middleware

    @property
    def loaded_paths(self) -> tuple[Path, ...]:
        """Return every configuration file read so far, in order."""

        with self._lock:
            return tuple(self._loaded_paths)

    def tools(self) -> Iterator[ToolDefinition]:
        """Iterate over the nodes created so far without loading anything."""

        with self._lock:
            return iter(list(self._tools.values()))

    # ------------------------------------------------------------------
    # nested sources

    def defer_block(
        self,
        body: DirectiveBody,
        words: ToolName,
        priority: int,
        *,
        parent: ConfigSource | None,
    ) -> None:
        """Register a nested body that is irrelevant to the current lookup."""

        source = BlockSource(priority=priority, path_prefix=tuple(words), parent=parent, body=body)
        with self._lock:
            self._index.register(source, tuple(words), priority)

    def include_path(
        self,
        target: IncludeTarget,
        *,
        words: ToolName,
        remaining: ToolName,
        priority: int,
        parent: ConfigSource | None,
    ) -> None:
        """Mount ``target`` at ``words`` and evaluate it for ``remaining``.

        Args:
            target: Path (relative to the including source) or remote reference.
            words: Tool name at which the included source applies.
            remaining: Remaining words of the lookup in progress.
            priority: Priority inherited from the including source.
            parent: Including source.

        Raises:
            SourceLoadError: If the target does not exist or includes itself.
        """

        if isinstance(target, RemoteRef):
            source: ConfigSource | None = RemoteSource(priority=priority, path_prefix=words, parent=parent, ref=target)
        else:
            path = Path(target).expanduser()
            if not path.is_absolute():
                base = parent.context_directory if parent is not None else None
                path = (base or Path.cwd()) / path
            self._check_include_cycle(path, parent)
            source = self._source_for_path(path, words=words, priority=priority, parent=parent)
            if source is None:
                where = parent.display if parent is not None else None
                raise SourceLoadError(f"include target not found: {path}", source=where)
        entry = self._new_entry(source, words, priority)
        self._evaluate(entry, remaining)

    @staticmethod
    def _check_include_cycle(path: Path, parent: ConfigSource | None) -> None:
        resolved = path.resolve()
        source = parent
        while source is not None:
            if isinstance(source, (FileSource, DirectorySource)) and source.path.resolve() == resolved:
                raise SourceLoadError(f"include cycle through {path}", source=parent.display if parent else None)
            source = source.parent

    # ------------------------------------------------------------------
    # evaluation

    def _load_for_prefix(self, prefix: ToolName) -> None:
        owner = threading.get_ident()
        with self._idle:
            while self._index.busy(prefix, owner):
                self._idle.wait()
            relevant = self._index.take_relevant(prefix)
            entries = [item.entry for item in relevant]
            self._index.check_out(entries, owner)
        try:
            for position, item in enumerate(relevant):
                try:
                    self._evaluate(item.entry, item.remaining)
                except Exception:
                    with self._lock:
                        for pending in relevant[position + 1 :]:
                            self._index.requeue(pending.entry)
                    raise
        finally:
            with self._idle:
                self._index.check_in(entries)
                self._idle.notify_all()

    def _new_entry(self, source: ConfigSource, words: ToolName, priority: int) -> PendingSource:
        with self._lock:
            return self._index.new_entry(source, words, priority)

    def _note_loaded(self, path: Path) -> None:
        with self._lock:
            self._loaded_paths.append(path)

    def _evaluate(self, entry: PendingSource, remaining: ToolName) -> None:
        source = entry.source
        LOGGER.debug("evaluating %s for %s", source.display, display_name(entry.words + remaining))
        if isinstance(source, BlockSource):
            tool = self.get_or_create(entry.words, entry.priority).tool
            Builder.build(self, source, tool, remaining, entry.priority, source.body)
        elif isinstance(source, FileSource):
            self._load_file(source, entry.words, remaining, entry.priority)
        elif isinstance(source, DirectorySource):
            self._load_directory(entry, remaining)
        elif isinstance(source, RemoteSource):
            self._load_remote(source, entry.words, remaining, entry.priority)
        else:  # pragma: no cover - closed set of source kinds
            raise SourceLoadError(f"unsupported source kind {type(source).__name__}", source=source.display)

    def _load_file(self, source: FileSource, words: ToolName, remaining: ToolName, priority: int) -> None:
        path = source.path
        self._note_loaded(path)
        if path.suffix == PYTHON_SUFFIX:
            body: DirectiveBody = load_python_body(path)
        elif path.suffix in DOCUMENT_SUFFIXES:
            body = load_document_body(path)
        else:
            raise SourceLoadError(f"unsupported configuration file type {path.suffix!r}", source=str(path))
        tool = self.get_or_create(words, priority).tool
        Builder.build(self, source, tool, remaining, priority, body)

    def _load_directory(self, entry: PendingSource, remaining: ToolName) -> None:
        source = cast(DirectorySource, entry.source)
        scanned = False
        try:
            if not entry.index_loaded:
                entry.index_loaded = True
                self.get_or_create(entry.words, entry.priority)
                self._load_directory_index(source, entry.words, remaining, entry.priority)
            if remaining:
                head = remaining[0]
                if head not in entry.probed:
                    entry.probed.add(head)
                    for candidate in candidate_entries(self.naming, head):
                        self._load_child(source, entry, head, source.path / candidate, remaining[1:])
                return
            probed = set(entry.probed)
            for segment, child_path in self._directory_children(source.path):
                if segment not in probed:
                    entry.probed.add(segment)
                    self._load_child(source, entry, segment, child_path, ROOT_NAME)
            scanned = True
        finally:
            # A failed child is marked probed; its siblings stay reachable.
            if not scanned:
                with self._lock:
                    self._index.requeue(entry)

    def _load_directory_index(
        self,
        source: DirectorySource,
        words: ToolName,
        remaining: ToolName,
        priority: int,
    ) -> None:
        if self.preload_file_name:
            preload = source.path / self.preload_file_name
            if preload.is_file():
                self._note_loaded(preload)
                import_config_module(preload)
        if not self.index_file_stem:
            return
        for suffix in self.naming.suffixes:
            index_path = source.path / f"{self.index_file_stem}{suffix}"
            if index_path.is_file():
                index_source = FileSource(priority=priority, path_prefix=words, parent=source, path=index_path)
                self._load_file(index_source, words, remaining, priority)

    def _directory_children(self, path: Path) -> list[tuple[str, Path]]:
        children: list[tuple[str, Path]] = []
        try:
            entries = sorted(path.iterdir())
        except OSError as exc:
            raise SourceLoadError(f"unable to list directory: {exc.strerror or exc}", source=str(path)) from exc
        for child in entries:
            if child.name.startswith(".") or child.name in IGNORED_ENTRIES:
                continue
            segment = split_entry(self.naming, child.name, is_dir=child.is_dir())
            if segment is not None:
                children.append((segment, child))
        return children

    def _load_child(
        self,
        parent: DirectorySource,
        entry: PendingSource,
        segment: str,
        path: Path,
        remaining: ToolName,
    ) -> None:
        if path.name.startswith(".") or path.name in IGNORED_ENTRIES:
            return
        words = entry.words + (segment,)
        source = self._source_for_path(path, words=words, priority=entry.priority, parent=parent)
        if source is None:
            return
        child_entry = self._new_entry(source, words, entry.priority)
        self._evaluate(child_entry, remaining)

    def _load_remote(self, source: RemoteSource, words: ToolName, remaining: ToolName, priority: int) -> None:
        if self.fetcher is None:
            raise SourceLoadError("no remote fetcher is configured", source=source.display)
        local = self.fetcher.materialize(source.ref)
        local_source = self._source_for_path(local, words=words, priority=priority, parent=source)
        if local_source is None:
            raise SourceLoadError(f"materialised path {local} does not exist", source=source.display)
        local_entry = self._new_entry(local_source, words, priority)
        self._evaluate(local_entry, remaining)

    def _source_for_path(
        self,
        path: Path,
        *,
        words: ToolName,
        priority: int,
        parent: ConfigSource | None,
        name: str | None = None,
    ) -> ConfigSource | None:
        if path.is_dir():
            data_dir = path / self.data_dir_name if self.data_dir_name else None
            return DirectorySource(
                priority=priority,
                path_prefix=words,
                parent=parent,
                name=name,
                path=path,
                data_dir=data_dir if data_dir is not None and data_dir.is_dir() else None,
            )
        if path.is_file():
            return FileSource(priority=priority, path_prefix=words, parent=parent, name=name, path=path)
        return None

    # ------------------------------------------------------------------
    # finishing

    def _finish_subtree(self, prefix: ToolName) -> None:
        depth = len(prefix)
        for name, tool in list(self._tools.items()):
            if name[:depth] != prefix and prefix[: len(name)] != name:
                continue
            if not tool.finished:
                tool.finish()
            if tool.finished and not tool.configured and not tool.is_alias:
                with tool.configuring():
                    for middleware in self.effective_middleware(tool):
                        middleware.config(tool, self)

    def __repr__(self) -> str:
        return f"Loader(tools={len(self._tools)}, pending={len(self._index)})"


__all__ = ["DEFAULT_DATA_DIR", "DEFAULT_INDEX_STEM", "DEFAULT_PRELOAD_FILE", "Loader", "LookupResult", "ToolSlot"]
