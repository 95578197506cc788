# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Standard CLI wiring: configuration discovery plus lookup and run."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from importlib import resources
from pathlib import Path

from rich.console import Console
from rich.text import Text

from ..config.settings import ToysSettings, load_settings
from ..errors import ToysError
from ..loader.loader import Loader
from ..runtime.console import detect_tty, get_console_manager
from ..runtime.runner import Runner
from ..sources.git_cache import GitCache
from ..sources.naming import CONFIG_SUFFIXES
from .shared import EXIT_ERROR, EXIT_INTERRUPTED

LOGGER = logging.getLogger(__name__)

BUILTIN_TOOLS_RESOURCE = "tools.toml"


def builtin_tools_path() -> Path:
    """Return the packaged document defining the builtin ``system`` tools."""

    return Path(str(resources.files("pytoys.builtins").joinpath(BUILTIN_TOOLS_RESOURCE)))


class StandardCli:
    """Discover configuration around the working directory and run tools.

    Sources are registered from highest to lowest priority: the working
    directory and each of its parents, the global search paths, then the
    builtin tools. Within one directory the ``.toys`` files and the ``.toys``
    directory share a priority.
    """

    def __init__(
        self,
        settings: ToysSettings | None = None,
        *,
        cwd: Path | None = None,
        console: Console | None = None,
        error_console: Console | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.cwd = (cwd or Path.cwd()).resolve()
        self.console = console or get_console_manager().get(color=detect_tty(), emoji=True)
        self.error_console = error_console or get_console_manager().get(
            color=detect_tty(stderr=True),
            emoji=True,
            stderr=True,
        )
        self._loader: Loader | None = None

    @property
    def loader(self) -> Loader:
        if self._loader is None:
            self._loader = self.build_loader()
        return self._loader

    def build_loader(self) -> Loader:
        """Create a loader with every discovered configuration source registered."""

        settings = self.settings
        loader = Loader(
            index_file_stem=settings.index_file_stem,
            preload_file_name=settings.preload_file_name,
            data_dir_name=settings.data_dir_name,
            extra_delimiters=settings.extra_delimiters,
            fetcher=GitCache(settings.git_cache_dir),
        )
        for directory in self.search_directories():
            candidates = self.config_candidates(directory)
            if candidates:
                LOGGER.debug("adding configuration from %s", directory)
                loader.add_path(candidates)
        if settings.include_builtins:
            loader.add_path(builtin_tools_path(), name="builtin tools")
        return loader

    def search_directories(self) -> Iterator[Path]:
        """Yield directories to search, nearest first, without duplicates."""

        global_dirs = [path.expanduser().resolve() for path in self.settings.search_paths]
        seen: set[Path] = set()
        current: Path | None = self.cwd
        while current is not None and current not in global_dirs:
            if current.name != self.settings.config_dir_name and current not in seen:
                seen.add(current)
                yield current
            parent = current.parent
            current = parent if parent != current else None
        for directory in global_dirs:
            if directory not in seen:
                seen.add(directory)
                yield directory

    def config_candidates(self, directory: Path) -> list[Path]:
        """Return the configuration files and directory present in ``directory``."""

        stem = self.settings.index_file_stem
        found = [directory / f"{stem}{suffix}" for suffix in CONFIG_SUFFIXES]
        candidates = [path for path in found if path.is_file()]
        config_dir = directory / self.settings.config_dir_name
        if config_dir.is_dir():
            candidates.append(config_dir)
        return candidates

    def run(self, args: Sequence[str], *, verbosity: int | None = None) -> int:
        """Look up the tool named by ``args`` and run it.

        Args:
            args: Command-line arguments after the executable name.
            verbosity: Starting verbosity; defaults to the configured value.

        Returns:
            int: Exit code of the tool, ``1`` for configuration errors, or
            ``130`` when interrupted.
        """

        level = self.settings.verbosity if verbosity is None else verbosity
        try:
            result = self.loader.lookup(list(args))
            runner = Runner(
                self.loader,
                result.tool,
                executable_name=self.settings.executable_name,
                console=self.console,
                error_console=self.error_console,
                cli=self,
            )
            return runner.run(result.args, verbosity=level)
        except KeyboardInterrupt:
            self.error_console.print(Text("Interrupted", style="yellow"))
            return EXIT_INTERRUPTED
        except ToysError as exc:
            LOGGER.debug("tool lookup failed", exc_info=exc)
            self.error_console.print(Text(f"Error: {exc}", style="bold red"))
            return EXIT_ERROR


__all__ = ["StandardCli", "builtin_tools_path"]
