"""清单合并

(a) 源码目录聚合:
    根清单自身的 source-directories 去掉缓存目录下的旧条目，
    并上每个已解析依赖的源码目录（改写到该依赖的缓存路径下），
    去重后按字典序排序写回。

(b) 锁文件落盘:
    最终 LockMap 按根清单原始 direct 声明拆成 direct / indirect 两部分，
    主清单与 git 依赖文件中不归本工具管理的字段原样保留。

路径统一使用 "/" 分隔，避免不同平台的协作者来回改写清单。
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import PurePosixPath
from typing import Any

from gitdeps.core.models import GIT_DEPENDENCIES_KEY, SOURCE_DIRS_KEY


def to_posix(path: str) -> str:
    return PurePosixPath(path.replace("\\", "/")).as_posix()


def is_cached_source(src: str, cache_prefix: str) -> bool:
    """src 是否位于缓存目录之下（上一次同步写入的依赖源码目录）"""
    path = to_posix(src)
    prefix = to_posix(cache_prefix)
    return path == prefix or path.startswith(prefix + "/")


def root_sources(declared: Iterable[str], cache_prefix: str) -> list[str]:
    return [to_posix(src) for src in declared if not is_cached_source(src, cache_prefix)]


def rebase_sources(declared: Iterable[str], repo_prefix: str, cache_prefix: str) -> list[str]:
    """依赖声明的源码目录改写到 repo_prefix 之下"""
    base = PurePosixPath(to_posix(repo_prefix))
    return [
        (base / to_posix(src)).as_posix()
        for src in declared
        if not is_cached_source(src, cache_prefix)
    ]


def partition_lock(
    lock: Mapping[str, str], direct_urls: Iterable[str],
) -> tuple[dict[str, str], dict[str, str]]:
    direct_set = set(direct_urls)
    direct = {url: lock[url] for url in sorted(lock) if url in direct_set}
    indirect = {url: lock[url] for url in sorted(lock) if url not in direct_set}
    return direct, indirect


def with_source_directories(manifest_doc: Mapping[str, Any], sources: list[str]) -> dict[str, Any]:
    updated = dict(manifest_doc)
    updated[SOURCE_DIRS_KEY] = list(sources)
    return updated


def with_git_dependencies(
    git_doc: Mapping[str, Any], direct: dict[str, str], indirect: dict[str, str],
) -> dict[str, Any]:
    updated = dict(git_doc)
    updated[GIT_DEPENDENCIES_KEY] = {"direct": direct, "indirect": indirect}
    return updated
