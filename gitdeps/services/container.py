"""服务容器：统一依赖注入

CLI 通过 get_container() 获取服务，而非直接 import 构造。

依赖关系图（→ 表示依赖）:
  sync → git, store

用法:
    container = ServiceContainer()
    report = container.sync.sync()       # 懒加载

    cfg = Config.from_file("my_gitdeps.yml")
    container = ServiceContainer(config=cfg)
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gitdeps.core.config import Config
    from gitdeps.services.git_client import GitClient
    from gitdeps.services.manifest_store import ManifestStore
    from gitdeps.services.sync_service import SyncService

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器，同一容器内的实例共享"""

    def __init__(self, config: Config | None = None) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from gitdeps.core.config import get_config
            config = get_config()
        self._config = config

    @property
    def config(self) -> Config:
        return self._config

    @property
    def git(self) -> GitClient:
        if "git" not in self._instances:
            from gitdeps.services.git_client import GitClient
            self._instances["git"] = GitClient(timeout=self._config.git_timeout)
        return self._instances["git"]  # type: ignore[return-value]

    @property
    def store(self) -> ManifestStore:
        if "store" not in self._instances:
            from gitdeps.services.manifest_store import ManifestStore
            self._instances["store"] = ManifestStore(
                manifest_file=self._config.manifest_file,
                git_deps_file=self._config.git_deps_file,
            )
        return self._instances["store"]  # type: ignore[return-value]

    @property
    def sync(self) -> SyncService:
        if "sync" not in self._instances:
            from gitdeps.services.sync_service import SyncService
            self._instances["sync"] = SyncService(
                self.git,
                self.store,
                project_dir=self._config.project_dir,
                cache_dir=self._config.cache_dir,
                remote=self._config.remote,
                default_host=self._config.default_host,
            )
        return self._instances["sync"]  # type: ignore[return-value]


# ---- 全局单例 ----

_global: ServiceContainer | None = None
_global_lock = threading.Lock()


def get_container() -> ServiceContainer:
    """获取全局 ServiceContainer 单例（线程安全）"""
    global _global  # noqa: PLW0603
    if _global is not None:
        return _global
    with _global_lock:
        if _global is None:
            _global = ServiceContainer()
        return _global


def reset_container() -> None:
    """重置全局容器（仅用于测试）"""
    global _global  # noqa: PLW0603
    with _global_lock:
        _global = None
