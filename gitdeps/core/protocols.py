"""领域协议定义

解析引擎只依赖这里的抽象，GitClient / ManifestStore 是默认实现，
测试注入内存替身即可，无需真实 git 仓库。

使用 typing.Protocol 而非 ABC，实现类无需继承。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

from gitdeps.core.models import BranchSummary


# =========================================================================
# 版本控制协议
# =========================================================================

class VcsClient(Protocol):
    """版本控制客户端协议

    任何操作失败都抛 VcsOperationError（超时为 VcsTimeoutError），对本次同步致命。
    """

    def clone(self, url: str, dest: Path) -> None:
        ...

    def list_tags(self, repo: Path) -> list[str]:
        ...

    def list_branches(self, repo: Path) -> BranchSummary:
        ...

    def fetch(self, repo: Path, remote: str = "origin") -> None:
        ...

    def checkout(self, repo: Path, ref: str) -> None:
        ...

    def list_remote_tags(self, url: str) -> list[str]:
        """不 clone，直接列出远端标签（install 选默认 ref 用）"""
        ...


# =========================================================================
# 清单存储协议
# =========================================================================

class DocumentStore(Protocol):
    """清单文档读写协议，写入时保留未识别字段"""

    def read_document(self, path: Path) -> dict[str, Any] | None:
        """文件不存在返回 None"""
        ...

    def write_document(self, path: Path, doc: dict[str, Any]) -> None:
        ...

    def write_documents(self, docs: list[tuple[Path, dict[str, Any]]]) -> None:
        """全部写入或全部不变"""
        ...

    def read_package(self, package_dir: Path) -> dict[str, Any] | None:
        """合并读取一个包的主清单与 git 依赖文件，都不存在返回 None"""
        ...
