"""核心数据模型

清单视图、分支摘要、版本冲突报告和同步结果集中定义在这里，
resolve / services / cli 各层统一从此处导入。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

APPLICATION = "application"
LIBRARY = "library"
MANIFEST_KINDS = (APPLICATION, LIBRARY)

# 清单中由本工具维护的字段，其余字段原样保留
TYPE_KEY = "type"
DEPENDENCIES_KEY = "dependencies"
GIT_DEPENDENCIES_KEY = "git-dependencies"
SOURCE_DIRS_KEY = "source-directories"

# library 未声明 source-directories 时的默认源码目录
DEFAULT_SOURCE_DIRS = ("src",)


@dataclass
class BranchSummary:
    """仓库分支列表快照

    detached=True 且 current 非空时，表示 HEAD 正游离在 current 这个 ref 上。
    """

    current: str = ""
    detached: bool = False
    all: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class VersionConflict:
    """锁定版本不满足某个请求范围（非致命，继续使用锁定版本）"""

    url: str
    requested: str
    locked: str

    def describe(self) -> str:
        return (
            f"有依赖要求 {self.url} 满足 {self.requested}，"
            f"但它已锁定在 {self.locked}"
        )


@dataclass
class PackageManifest:
    """已通过校验的清单视图（主清单与 git 依赖文件合并后的结果）"""

    kind: str
    dependencies: dict[str, Any] = field(default_factory=dict)
    git_dependencies: dict[str, Any] = field(default_factory=dict)
    source_directories: list[str] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> PackageManifest:
        kind = doc.get(TYPE_KEY, "")
        sources = doc.get(SOURCE_DIRS_KEY)
        if sources is None:
            sources = list(DEFAULT_SOURCE_DIRS) if kind == LIBRARY else []
        return cls(
            kind=kind,
            dependencies=dict(doc.get(DEPENDENCIES_KEY) or {}),
            git_dependencies=dict(doc.get(GIT_DEPENDENCIES_KEY) or {}),
            source_directories=list(sources),
        )

    @property
    def is_application(self) -> bool:
        return self.kind == APPLICATION

    def direct_git_dependencies(self) -> dict[str, str]:
        """直接声明的 git 依赖 {url: ref 或范围}"""
        if self.is_application:
            return dict(self.git_dependencies.get("direct") or {})
        return dict(self.git_dependencies)

    def indirect_git_dependencies(self) -> dict[str, str]:
        if self.is_application:
            return dict(self.git_dependencies.get("indirect") or {})
        return {}


@dataclass
class SyncReport:
    """一次成功同步的结果"""

    lock: dict[str, str]
    direct: dict[str, str]
    indirect: dict[str, str]
    source_directories: list[str]
    conflicts: list[VersionConflict] = field(default_factory=list)
    resolved: list[tuple[str, str]] = field(default_factory=list)  # 按访问顺序 (cache key, ref)
