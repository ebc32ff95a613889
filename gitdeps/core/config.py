"""集中配置管理

所有路径和 git 行为参数集中在 Config，支持从 YAML 文件加载 + 编程式覆盖。
核心解析逻辑不读取全局配置，由 ServiceContainer 显式注入。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from gitdeps.core.exceptions import ConfigError
from gitdeps.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """gitdeps 全局配置"""

    # 项目文件（相对 project_dir）
    project_dir: str = "."
    manifest_file: str = "package.yml"
    git_deps_file: str = "git-deps.yml"
    cache_dir: str = "deps/git"

    # git
    remote: str = "origin"
    git_timeout: int = 300  # 秒，单次 git 操作上限
    default_host: str = "github.com"  # install owner/repo 简写的默认主机

    @classmethod
    def from_file(cls, path: str = "gitdeps.yml") -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known}
        unknown = sorted(str(k) for k in data if k not in known)
        if unknown:
            logger.warning("配置文件 %s 中有未识别的配置项，已忽略: %s", path, ", ".join(unknown))
        try:
            cfg = cls(**matched)
        except TypeError as e:
            raise ConfigError(f"配置文件 {path} 无效: {e}") from e
        cfg.validate()
        return cfg

    def validate(self) -> None:
        if not isinstance(self.git_timeout, int) or self.git_timeout <= 0:
            raise ConfigError(f"git_timeout 必须是正整数: {self.git_timeout!r}")
        if Path(self.cache_dir).is_absolute():
            raise ConfigError(f"cache_dir 必须是相对 project_dir 的路径: {self.cache_dir}")
        for name in ("manifest_file", "git_deps_file", "remote", "default_host"):
            if not getattr(self, name):
                raise ConfigError(f"{name} 不能为空")
        if Path(self.manifest_file) == Path(self.git_deps_file):
            raise ConfigError(
                f"manifest_file 与 git_deps_file 不能是同一个文件: {self.manifest_file}"
            )


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = "gitdeps.yml") -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
