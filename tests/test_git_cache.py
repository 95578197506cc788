# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Remote git sources: cache layout, fetch reuse, and loader integration."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from pytoys import Loader, ToolDsl
from pytoys.errors import FetchError, SourceLoadError
from pytoys.sources.git_cache import GitCache, remote_key
from pytoys.sources.model_source import RemoteRef, RemoteSource

SHA = "0123456789abcdef0123456789abcdef01234567"


class FakeGit:
    """Stand-in for the git executable that records every invocation."""

    def __init__(self, files: dict[str, str]) -> None:
        self.files = files
        self.calls: list[list[str]] = []

    def __call__(self, cmd: Sequence[str], cwd: Path) -> str:
        args = list(cmd[1:])
        self.calls.append(args)
        if args[0] == "init":
            (cwd / ".git").mkdir(parents=True, exist_ok=True)
        elif args[0] == "rev-parse":
            return f"{SHA}\n"
        elif args[0] == "--work-tree":
            staging = Path(args[1])
            for relative, text in self.files.items():
                target = staging / relative
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(text, encoding="utf-8")
        return ""

    def count(self, command: str) -> int:
        return sum(1 for call in self.calls if call[0] == command)


class FakeFetcher:
    def __init__(self, root: Path) -> None:
        self.root = root
        self.refs: list[RemoteRef] = []

    def materialize(self, ref: RemoteRef) -> Path:
        self.refs.append(ref)
        return self.root / ref.path if ref.path else self.root


def test_materialize_checks_out_the_fetched_commit(tmp_path: Path) -> None:
    git = FakeGit({"tools/.toys.toml": 'desc = "Remote"\n'})
    cache = GitCache(tmp_path / "cache", runner=git)

    target = cache.materialize(RemoteRef("https://example.com/repo.git", "main", "tools"))

    assert target == tmp_path / "cache" / remote_key("https://example.com/repo.git") / "trees" / SHA / "tools"
    assert (target / ".toys.toml").read_text(encoding="utf-8") == 'desc = "Remote"\n'
    assert ["fetch", "--quiet", "--depth=1", "https://example.com/repo.git", "main"] in git.calls


def test_materialize_fetches_each_commit_once(tmp_path: Path) -> None:
    git = FakeGit({"a.toml": "", "b.toml": ""})
    cache = GitCache(tmp_path, runner=git)

    cache.materialize(RemoteRef("repo", "main", "a.toml"))
    cache.materialize(RemoteRef("repo", "main", "b.toml"))

    assert git.count("init") == 1
    assert git.count("fetch") == 1
    assert git.count("--work-tree") == 1


def test_full_sha_reuses_an_existing_tree_without_fetching(tmp_path: Path) -> None:
    tree = tmp_path / remote_key("repo") / "trees" / SHA
    tree.mkdir(parents=True)
    git = FakeGit({})

    assert GitCache(tmp_path, runner=git).materialize(RemoteRef("repo", SHA)) == tree
    assert git.calls == []


def test_missing_path_in_commit_is_a_fetch_error(tmp_path: Path) -> None:
    cache = GitCache(tmp_path, runner=FakeGit({"present.toml": ""}))

    with pytest.raises(FetchError, match="does not exist") as info:
        cache.materialize(RemoteRef("repo", "main", "absent.toml"))
    assert info.value.source == "git:repo@main/absent.toml"


def test_git_failures_become_fetch_errors(tmp_path: Path) -> None:
    def failing(cmd: Sequence[str], cwd: Path) -> str:
        raise RuntimeError("network unreachable")

    with pytest.raises(FetchError, match="git init failed"):
        GitCache(tmp_path, runner=failing).materialize(RemoteRef("repo"))


def test_remote_sources_load_through_the_fetcher(tmp_path: Path) -> None:
    (tmp_path / "deploy.toml").write_text('desc = "Deploy remotely"\nexec = ["true"]\n', encoding="utf-8")
    fetcher = FakeFetcher(tmp_path)
    loader = Loader(fetcher=fetcher).add_remote("https://example.com/ops.git", commit="v1")

    assert fetcher.refs == []
    tool = loader.lookup(["deploy"]).tool

    assert tool.desc == "Deploy remotely"
    assert fetcher.refs == [RemoteRef("https://example.com/ops.git", "v1", "")]
    assert isinstance(tool.source.parent.parent, RemoteSource)


def test_include_git_mounts_the_remote_at_the_current_tool(tmp_path: Path) -> None:
    (tmp_path / "lib").mkdir()
    (tmp_path / "lib" / "sync.toml").write_text('exec = ["true"]\n', encoding="utf-8")
    fetcher = FakeFetcher(tmp_path)

    def configure(t: ToolDsl) -> None:
        @t.tool("remote")
        def remote(t: ToolDsl) -> None:
            t.include_git("repo", path="lib")

    loader = Loader(fetcher=fetcher).add_block(configure)

    assert loader.lookup(["remote", "sync"]).tool.full_name == ("remote", "sync")
    assert fetcher.refs == [RemoteRef("repo", "HEAD", "lib")]


def test_remote_sources_need_a_fetcher() -> None:
    loader = Loader().add_remote("repo")

    with pytest.raises(SourceLoadError, match="no remote fetcher"):
        loader.lookup([])
