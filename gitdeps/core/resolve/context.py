"""一次同步的解析上下文

每次同步新建一个，贯穿整个遍历，失败即丢弃；只有成功结束时才由
SyncService 落盘。可变状态只有三份: lock / visited / sources，
全部在 _guard 下更新，claim() 是按 url 的原子 test-and-set。
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field

from gitdeps.core.exceptions import ResolutionCancelledError
from gitdeps.core.models import VersionConflict

logger = logging.getLogger(__name__)


@dataclass
class ResolutionContext:
    prior_locks: dict[str, str] = field(default_factory=dict)
    lock: dict[str, str] = field(default_factory=dict)
    visited: set[str] = field(default_factory=set)
    sources: set[str] = field(default_factory=set)
    conflicts: list[VersionConflict] = field(default_factory=list)
    resolved: list[tuple[str, str]] = field(default_factory=list)
    cancel_event: threading.Event = field(default_factory=threading.Event)
    _guard: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def claim(self, url: str) -> bool:
        """首次认领返回 True，之后对同一 url 一律返回 False"""
        with self._guard:
            if url in self.visited:
                return False
            self.visited.add(url)
            return True

    def locks(self) -> dict[str, str]:
        """本次已锁定值优先、上次锁定值兜底的合并视图"""
        with self._guard:
            return {**self.prior_locks, **self.lock}

    def record(self, url: str, key: str, ref: str) -> None:
        with self._guard:
            self.lock[url] = ref
            self.resolved.append((key, ref))

    def report_conflict(self, conflict: VersionConflict | None) -> None:
        if conflict is None:
            return
        logger.warning("版本冲突: %s", conflict.describe())
        with self._guard:
            self.conflicts.append(conflict)

    def add_sources(self, paths: Iterable[str]) -> None:
        with self._guard:
            self.sources.update(paths)

    def sorted_sources(self) -> list[str]:
        with self._guard:
            return sorted(self.sources)

    def cancel(self) -> None:
        self.cancel_event.set()

    def check_cancelled(self) -> None:
        if self.cancel_event.is_set():
            raise ResolutionCancelledError("依赖解析已被取消")
