"""依赖链构建器

对传递依赖图中的每个仓库恰好访问一次，所有步骤共享同一个 ResolutionContext。

每个 {url, 请求值} 的处理步骤:
  1. url 已被认领 -> 直接跳过
  2. 先认领再递归，环依赖不会无限展开
  3. 解析 ref、判定分支/标签，失败即中止整次同步
  4. 本地无缓存则 clone；有缓存则 fetch（HEAD 已游离在目标 ref 上时跳过 fetch 与 checkout）
  5. checkout 目标 ref，写入 LockMap
  6. 读取并校验该仓库的清单，先递归处理它声明的 git 依赖
  7. 把该仓库的源码目录并入 ResolvedSourcePaths

认领集合只增不减，总步数以图中不同仓库数为上界；菱形依赖无论被多少
父节点引用都只拉取、解析一次。中途失败时已完成的 clone / checkout 保留在
本地缓存中，重试时直接从 "已存在" 状态继续。
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path, PurePosixPath

from gitdeps.core.exceptions import ManifestInvalidError, UnresolvableRangeError
from gitdeps.core.models import LIBRARY, PackageManifest
from gitdeps.core.protocols import DocumentStore, VcsClient
from gitdeps.core.reconciler import rebase_sources
from gitdeps.core.resolve.classifier import ensure_not_branch
from gitdeps.core.resolve.context import ResolutionContext
from gitdeps.core.resolve.locator import parse_locator
from gitdeps.core.resolve.ref_resolver import resolve_ref
from gitdeps.core.validator import validate_manifest

logger = logging.getLogger(__name__)


class DependencyChain:
    """传递依赖遍历驱动"""

    def __init__(
        self,
        vcs: VcsClient,
        store: DocumentStore,
        *,
        project_dir: Path,
        cache_dir: str,
        remote: str = "origin",
    ) -> None:
        self.vcs = vcs
        self.store = store
        self.project_dir = project_dir
        self.cache_dir = cache_dir
        self.remote = remote

    def run(self, declarations: Mapping[str, str], ctx: ResolutionContext) -> None:
        """按声明顺序处理根依赖，递归展开全部传递依赖"""
        for url, requested in declarations.items():
            self._visit(url, requested, ctx)

    # ------------------------------------------------------------------
    # 单个仓库
    # ------------------------------------------------------------------

    def _visit(self, url: str, requested: str, ctx: ResolutionContext) -> None:
        ctx.check_cancelled()
        if not ctx.claim(url):
            logger.debug("已处理，跳过: %s", url)
            # 后来的请求不再重新求解，只检查已锁定值是否满足它
            if url in ctx.lock:
                ctx.report_conflict(resolve_ref(requested, url, ctx.locks()).conflict)
            return

        key = parse_locator(url).cache_key
        repo_prefix = PurePosixPath(self.cache_dir, key).as_posix()
        repo_path = self.project_dir / repo_prefix

        ref = self._settle(url, requested, repo_path, ctx)
        ctx.record(url, key, ref)
        logger.info("%s => %s", key, ref)

        manifest = self._load_manifest(repo_path)
        for dep_url, dep_requested in manifest.direct_git_dependencies().items():
            self._visit(dep_url, dep_requested, ctx)

        ctx.add_sources(
            rebase_sources(manifest.source_directories, repo_prefix, self.cache_dir),
        )

    def _settle(
        self, url: str, requested: str, repo_path: Path, ctx: ResolutionContext,
    ) -> str:
        """保证 repo_path 检出在解析出的 ref 上，返回该 ref"""
        if repo_path.exists():
            offline = resolve_ref(requested, url, ctx.locks())
            if offline.ref is not None:
                branches = self.vcs.list_branches(repo_path)
                if branches.detached and branches.current == offline.ref:
                    logger.debug("已检出在 %s，跳过 fetch: %s", offline.ref, url)
                    ctx.report_conflict(offline.conflict)
                    return offline.ref
            logger.info("更新: %s", url)
            self.vcs.fetch(repo_path, self.remote)
        else:
            logger.info("克隆: %s -> %s", url, repo_path)
            self.vcs.clone(url, repo_path)

        tags = self.vcs.list_tags(repo_path)
        resolution = resolve_ref(requested, url, ctx.locks(), tags)
        ctx.report_conflict(resolution.conflict)
        ref = resolution.ref
        if ref is None:
            raise UnresolvableRangeError(f"{url}: 无法解析 {requested}")

        ensure_not_branch(url, ref, tags, self.vcs.list_branches(repo_path))
        self.vcs.checkout(repo_path, ref)
        return ref

    def _load_manifest(self, repo_path: Path) -> PackageManifest:
        doc = self.store.read_package(repo_path)
        if doc is None:
            raise ManifestInvalidError("未找到清单文件", origin=str(repo_path))
        validate_manifest(doc, expected=LIBRARY, origin=str(repo_path))
        return PackageManifest.from_document(doc)
