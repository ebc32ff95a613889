"""同步服务：组装根清单输入、驱动依赖链、一次性落盘

  sync()     完整解析；只有全部成功后才写 git 依赖文件与主清单
  init()     生成空的 git 依赖文件
  install()  新增一个直接依赖并同步；新声明与同步结果一起落盘
  tree()     只读查看当前锁定结果，不访问网络

落盘是全有或全无：任何校验 / 解析 / VCS 错误都在写文件之前抛出，
主清单永远不会被写成一半。
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

from gitdeps.core.exceptions import (
    AlreadyInstalledError,
    ManifestInvalidError,
    UnresolvableRangeError,
)
from gitdeps.core.models import (
    APPLICATION,
    GIT_DEPENDENCIES_KEY,
    PackageManifest,
    SyncReport,
)
from gitdeps.core.protocols import VcsClient
from gitdeps.core.reconciler import (
    partition_lock,
    root_sources,
    with_git_dependencies,
    with_source_directories,
)
from gitdeps.core.resolve.chain import DependencyChain
from gitdeps.core.resolve.context import ResolutionContext
from gitdeps.core.resolve.locator import expand_shorthand, parse_locator
from gitdeps.core.resolve.versions import as_range, max_version
from gitdeps.core.validator import validate_manifest
from gitdeps.services.manifest_store import ManifestStore

logger = logging.getLogger(__name__)


def prior_locks(manifest: PackageManifest) -> dict[str, str]:
    """上次同步留下的锁定值：直接与间接依赖中所有非范围的取值"""
    locked: dict[str, str] = {}
    for section in (manifest.indirect_git_dependencies(), manifest.direct_git_dependencies()):
        for url, ref in section.items():
            if as_range(ref) is None:
                locked[url] = ref
    return locked


class SyncService:
    """依赖同步入口"""

    def __init__(
        self,
        vcs: VcsClient,
        store: ManifestStore,
        *,
        project_dir: str = ".",
        cache_dir: str = "deps/git",
        remote: str = "origin",
        default_host: str = "github.com",
    ) -> None:
        self.vcs = vcs
        self.store = store
        self.project_dir = Path(project_dir)
        self.cache_dir = cache_dir
        self.remote = remote
        self.default_host = default_host

    @property
    def manifest_path(self) -> Path:
        return self.store.manifest_path(self.project_dir)

    @property
    def git_deps_path(self) -> Path:
        return self.store.git_deps_path(self.project_dir)

    # ------------------------------------------------------------------
    # sync
    # ------------------------------------------------------------------

    def sync(self, cancel_event: threading.Event | None = None) -> SyncReport:
        return self._sync(extra_direct={}, cancel_event=cancel_event)

    def _sync(
        self,
        extra_direct: dict[str, str],
        cancel_event: threading.Event | None = None,
    ) -> SyncReport:
        manifest_doc, git_doc = self._read_root()
        if extra_direct:
            git_doc = self._with_direct(git_doc, extra_direct)

        merged = {**manifest_doc, **git_doc}
        validate_manifest(merged, expected=APPLICATION, origin=str(self.manifest_path))
        root = PackageManifest.from_document(merged)
        direct = root.direct_git_dependencies()

        ctx = ResolutionContext(prior_locks=prior_locks(root))
        if cancel_event is not None:
            ctx.cancel_event = cancel_event
        ctx.add_sources(root_sources(root.source_directories, self.cache_dir))

        logger.info("开始同步: %d 个直接 git 依赖", len(direct))
        chain = DependencyChain(
            self.vcs, self.store,
            project_dir=self.project_dir,
            cache_dir=self.cache_dir,
            remote=self.remote,
        )
        chain.run(direct, ctx)

        new_direct, new_indirect = partition_lock(ctx.lock, direct)
        sources = ctx.sorted_sources()

        # 全部成功后才落盘，两份文档一起替换
        self.store.write_documents([
            (self.git_deps_path, with_git_dependencies(git_doc, new_direct, new_indirect)),
            (self.manifest_path, with_source_directories(manifest_doc, sources)),
        ])
        logger.info(
            "同步完成: %d 个仓库 (直接 %d, 间接 %d), %d 个版本冲突",
            len(ctx.lock), len(new_direct), len(new_indirect), len(ctx.conflicts),
        )
        return SyncReport(
            lock=dict(ctx.lock),
            direct=new_direct,
            indirect=new_indirect,
            source_directories=sources,
            conflicts=list(ctx.conflicts),
            resolved=list(ctx.resolved),
        )

    def _read_root(self) -> tuple[dict[str, Any], dict[str, Any]]:
        manifest_doc = self.store.read_document(self.manifest_path)
        if manifest_doc is None:
            raise ManifestInvalidError("未找到主清单文件", origin=str(self.manifest_path))
        git_doc = self.store.read_document(self.git_deps_path)
        if git_doc is None:
            raise ManifestInvalidError(
                "未找到 git 依赖文件（可先执行 gitdeps init）", origin=str(self.git_deps_path),
            )
        return manifest_doc, git_doc

    @staticmethod
    def _with_direct(git_doc: dict[str, Any], extra: dict[str, str]) -> dict[str, Any]:
        """把新的直接依赖并入 git 依赖文档（同名间接依赖被提升为直接依赖）"""
        section = git_doc.get(GIT_DEPENDENCIES_KEY)
        if not isinstance(section, dict):
            return git_doc
        direct = dict(section.get("direct") or {})
        indirect = dict(section.get("indirect") or {})
        for url, ref in extra.items():
            direct[url] = ref
            indirect.pop(url, None)
        updated = dict(git_doc)
        updated[GIT_DEPENDENCIES_KEY] = {**section, "direct": direct, "indirect": indirect}
        return updated

    # ------------------------------------------------------------------
    # init / install / tree
    # ------------------------------------------------------------------

    def init(self) -> Path:
        """生成空的 git 依赖文件，已存在时拒绝覆盖"""
        path = self.git_deps_path
        if path.exists():
            raise ManifestInvalidError("git 依赖文件已存在", origin=str(path))
        self.store.write_document(
            path, {GIT_DEPENDENCIES_KEY: {"direct": {}, "indirect": {}}},
        )
        logger.info("已生成: %s", path)
        return path

    def install(self, locator: str, ref: str | None = None) -> SyncReport:
        """新增一个直接 git 依赖并同步

        locator 可以是完整地址或 owner/repo 简写；ref 缺省时取远端最大的版本标签。
        """
        url = expand_shorthand(locator, self.default_host)
        parse_locator(url)

        _, git_doc = self._read_root()
        section = git_doc.get(GIT_DEPENDENCIES_KEY)
        declared = section.get("direct") if isinstance(section, dict) else None
        if isinstance(declared, dict) and url in declared:
            raise AlreadyInstalledError(f"{url} 已是直接依赖 (ref={declared[url]})")

        if not ref:
            ref = max_version(self.vcs.list_remote_tags(url))
            if ref is None:
                raise UnresolvableRangeError(f"{url} 没有语义化版本标签，请显式指定 ref")
            logger.info("未指定 ref，使用最新版本标签: %s", ref)

        logger.info("安装: %s @ %s", url, ref)
        return self._sync(extra_direct={url: ref})

    def tree(self) -> dict[str, Any]:
        """当前锁定结果与源码目录（只读）"""
        manifest_doc, git_doc = self._read_root()
        merged = {**manifest_doc, **git_doc}
        validate_manifest(merged, expected=APPLICATION, origin=str(self.manifest_path))
        root = PackageManifest.from_document(merged)
        return {
            "direct": root.direct_git_dependencies(),
            "indirect": root.indirect_git_dependencies(),
            "source-directories": list(root.source_directories),
        }
