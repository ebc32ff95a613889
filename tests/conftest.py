"""测试公共夹具：内存版 VCS 替身与项目脚手架"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from gitdeps.core.exceptions import VcsOperationError
from gitdeps.core.models import BranchSummary
from gitdeps.services.manifest_store import ManifestStore
from gitdeps.services.sync_service import SyncService


class FakeRepo:
    """远端仓库：每个 ref 对应一份 library 清单"""

    def __init__(
        self,
        url: str,
        tags: dict[str, dict[str, Any] | None],
        branches: dict[str, dict[str, Any] | None] | None = None,
        commits: dict[str, dict[str, Any] | None] | None = None,
        bare: tuple[str, ...] = (),
    ) -> None:
        self.url = url
        self.tags = dict(tags)
        self.branches = dict(branches if branches is not None else {"main": None})
        self.commits = dict(commits or {})
        self.bare = set(bare)  # 检出后没有清单文件的 ref

    def known(self, ref: str) -> bool:
        return ref in self.tags or ref in self.commits or ref in self.branches

    def doc_at(self, ref: str) -> dict[str, Any] | None:
        if ref in self.bare:
            return None
        for refs in (self.tags, self.commits, self.branches):
            if ref in refs:
                fields = refs[ref] or {}
                if "type" in fields:
                    return dict(fields)
                return {"type": "library", "dependencies": {}, **fields}
        return None


class FakeVcs:
    """VcsClient 的内存替身，记录每次调用，检出时把清单写到工作目录"""

    def __init__(self, manifest_file: str = "package.yml") -> None:
        self.manifest_file = manifest_file
        self.repos: dict[str, FakeRepo] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_on: set[tuple[str, str]] = set()
        self._heads: dict[Path, list[Any]] = {}  # path -> [url, head, detached]

    def add_repo(self, url: str, tags: dict[str, Any], **kwargs: Any) -> FakeRepo:
        repo = FakeRepo(url, tags, **kwargs)
        self.repos[url] = repo
        return repo

    def count(self, op: str, url: str | None = None) -> int:
        return sum(1 for o, u in self.calls if o == op and (url is None or u == url))

    def _record(self, op: str, url: str) -> None:
        self.calls.append((op, url))
        if (op, url) in self.fail_on:
            raise VcsOperationError(f"git {op} 失败: {url}")

    def _repo_at(self, path: Path) -> FakeRepo:
        url = self._heads[path][0]
        return self.repos[url]

    def _materialize(self, path: Path, doc: dict[str, Any] | None) -> None:
        manifest = path / self.manifest_file
        if doc is None:
            manifest.unlink(missing_ok=True)
            return
        if manifest.suffix == ".json":
            text = json.dumps(doc, indent=4)
        else:
            text = yaml.safe_dump(doc, sort_keys=False)
        manifest.write_text(text, encoding="utf-8")

    # ---- VcsClient ----

    def clone(self, url: str, dest: Path) -> None:
        self._record("clone", url)
        if url not in self.repos:
            raise VcsOperationError(f"git clone 失败: 仓库不存在 {url}")
        dest.mkdir(parents=True)
        repo = self.repos[url]
        default = next(iter(repo.branches), "")
        self._heads[dest] = [url, default, False]
        self._materialize(dest, repo.doc_at(default))

    def fetch(self, repo: Path, remote: str = "origin") -> None:
        self._record("fetch", self._heads[repo][0])

    def list_tags(self, repo: Path) -> list[str]:
        return list(self._repo_at(repo).tags)

    def list_branches(self, repo: Path) -> BranchSummary:
        url, head, detached = self._heads[repo]
        names = list(self.repos[url].branches)
        return BranchSummary(
            current=head,
            detached=detached,
            all=names + [f"remotes/origin/{n}" for n in names],
        )

    def checkout(self, repo: Path, ref: str) -> None:
        url = self._heads[repo][0]
        self._record("checkout", url)
        fake = self.repos[url]
        if not fake.known(ref):
            raise VcsOperationError(f"git checkout 失败: 未知 ref {ref}")
        self._heads[repo] = [url, ref, ref not in fake.branches]
        self._materialize(repo, fake.doc_at(ref))

    def list_remote_tags(self, url: str) -> list[str]:
        self._record("ls-remote", url)
        if url not in self.repos:
            raise VcsOperationError(f"git ls-remote 失败: 仓库不存在 {url}")
        return list(self.repos[url].tags)


@pytest.fixture
def vcs() -> FakeVcs:
    return FakeVcs()


@pytest.fixture
def vcs_factory() -> Callable[..., FakeVcs]:
    """按需构造 FakeVcs（例如换用 JSON 清单文件名）"""
    return FakeVcs


@pytest.fixture
def write_project(tmp_path: Path) -> Callable[..., Path]:
    """在 tmp_path 下写出根项目的主清单与 git 依赖文件"""

    def _write(
        direct: dict[str, str] | None = None,
        indirect: dict[str, str] | None = None,
        sources: list[str] | None = None,
        extra: dict[str, Any] | None = None,
    ) -> Path:
        manifest = {
            "type": "application",
            **(extra or {}),
            "dependencies": {"direct": {}, "indirect": {}},
            "source-directories": list(sources if sources is not None else ["src"]),
        }
        git_deps = {
            "git-dependencies": {"direct": dict(direct or {}), "indirect": dict(indirect or {})},
        }
        (tmp_path / "package.yml").write_text(
            yaml.safe_dump(manifest, sort_keys=False), encoding="utf-8",
        )
        (tmp_path / "git-deps.yml").write_text(
            yaml.safe_dump(git_deps, sort_keys=False), encoding="utf-8",
        )
        return tmp_path

    return _write


@pytest.fixture
def service(vcs: FakeVcs, tmp_path: Path) -> SyncService:
    return SyncService(vcs, ManifestStore(), project_dir=str(tmp_path))


def read_yaml(path: Path) -> dict[str, Any]:
    return yaml.safe_load(path.read_text(encoding="utf-8"))


@pytest.fixture
def read_docs(tmp_path: Path) -> Callable[[], tuple[dict[str, Any], dict[str, Any]]]:
    """读回 (主清单, git 依赖文件)"""

    def _read() -> tuple[dict[str, Any], dict[str, Any]]:
        return read_yaml(tmp_path / "package.yml"), read_yaml(tmp_path / "git-deps.yml")

    return _read
