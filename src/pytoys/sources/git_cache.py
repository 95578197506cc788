# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Materialise remote git sources into a local cache directory."""

from __future__ import annotations

import hashlib
import logging
import re
import shutil
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Final, Protocol

from ..errors import FetchError
from ..runtime.process import CommandOptions, run_command
from .model_source import RemoteRef

LOGGER = logging.getLogger(__name__)

GitRunner = Callable[[Sequence[str], Path], str]

_FULL_SHA: Final[re.Pattern[str]] = re.compile(r"^[0-9a-f]{40}$")
REPO_DIRNAME: Final[str] = "repo"
TREES_DIRNAME: Final[str] = "trees"


class RemoteFetcher(Protocol):
    """Turn a :class:`RemoteRef` into a local path."""

    def materialize(self, ref: RemoteRef) -> Path:
        """Return a local path holding the referenced file or directory."""
        ...


def remote_key(remote: str) -> str:
    """Return a filesystem safe key for ``remote``."""

    return hashlib.sha256(remote.encode("utf-8")).hexdigest()[:24]


class GitCache:
    """Cache shallow checkouts of remote repositories.

    Each remote gets a private repository under ``cache_dir`` plus one
    extracted tree per commit. Work on a remote holds a per remote lock so
    concurrent callers wait for a single fetch.
    """

    def __init__(self, cache_dir: Path, *, runner: GitRunner | None = None) -> None:
        """Create the cache.

        Args:
            cache_dir: Directory holding cached repositories.
            runner: Optional git runner receiving the git arguments and the
                working directory, returning stdout. Defaults to
                :func:`run_command`.
        """

        self.cache_dir = cache_dir
        self._runner = runner or self._default_runner
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._resolved: dict[tuple[str, str], Path] = {}

    def _lock_for(self, remote: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(remote, threading.Lock())

    def materialize(self, ref: RemoteRef) -> Path:
        """Return the local path for ``ref``, fetching it when needed.

        Args:
            ref: Remote reference to materialise.

        Returns:
            Path: Path of the requested file or directory in the cached tree.

        Raises:
            FetchError: If git fails or the path does not exist in the commit.
        """

        with self._lock_for(ref.remote):
            tree = self._resolved.get((ref.remote, ref.commit))
            if tree is None:
                tree = self._checkout(ref)
                self._resolved[(ref.remote, ref.commit)] = tree
        target = tree / ref.path if ref.path else tree
        if not target.exists():
            raise FetchError(f"path {ref.path!r} does not exist at {ref.commit}", source=ref.describe())
        return target

    def _checkout(self, ref: RemoteRef) -> Path:
        base = self.cache_dir / remote_key(ref.remote)
        repo = base / REPO_DIRNAME
        trees = base / TREES_DIRNAME
        if _FULL_SHA.match(ref.commit) and (trees / ref.commit).is_dir():
            return trees / ref.commit
        try:
            if not (repo / ".git").exists():
                repo.mkdir(parents=True, exist_ok=True)
                self._git(["init", "--quiet"], repo, ref)
            LOGGER.debug("fetching %s", ref.describe())
            self._git(["fetch", "--quiet", "--depth=1", ref.remote, ref.commit], repo, ref)
            sha = self._git(["rev-parse", "FETCH_HEAD"], repo, ref).strip()
            tree = trees / sha
            if not tree.is_dir():
                staging = trees / f".{sha}.partial"
                shutil.rmtree(staging, ignore_errors=True)
                staging.mkdir(parents=True)
                try:
                    self._git(["--work-tree", str(staging.resolve()), "checkout", "--quiet", sha, "--", "."], repo, ref)
                    staging.rename(tree)
                finally:
                    shutil.rmtree(staging, ignore_errors=True)
        except OSError as exc:
            raise FetchError(f"unable to prepare git cache: {exc}", source=ref.describe()) from exc
        return tree

    def _git(self, args: Sequence[str], cwd: Path, ref: RemoteRef) -> str:
        try:
            return self._runner(["git", *args], cwd)
        except FetchError:
            raise
        except (OSError, RuntimeError) as exc:
            raise FetchError(f"git {args[0]} failed: {exc}", source=ref.describe()) from exc

    @staticmethod
    def _default_runner(cmd: Sequence[str], cwd: Path) -> str:
        """Run ``cmd`` in ``cwd`` and return stdout.

        Raises:
            FetchError: If the command exits with a non-zero status.
        """

        completed = run_command(cmd, options=CommandOptions(cwd=cwd, capture_output=True, check=False))
        if completed.returncode != 0:
            detail = (completed.stderr or "").strip() or f"exit status {completed.returncode}"
            raise FetchError(f"{' '.join(cmd[:2])} failed: {detail}")
        return completed.stdout or ""


__all__ = ["GitCache", "GitRunner", "RemoteFetcher", "remote_key"]
