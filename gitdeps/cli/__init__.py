"""gitdeps 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

import functools
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from gitdeps import __version__
from gitdeps.core.exceptions import GitDepsError
from gitdeps.services.container import get_container, reset_container
from gitdeps.utils.logger import setup_logging


def _svc() -> Any:
    """获取全局服务容器的快捷方式"""
    return get_container()


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """把业务异常转换为 click 错误输出（退出码 1）"""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except GitDepsError as e:
            raise click.ClickException(f"[{e.code}] {e}") from e

    return wrapper


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "config_path", default="gitdeps.yml", envvar="GITDEPS_CONFIG",
    show_default=True, help="配置文件路径（不存在时使用默认配置）",
)
@handle_errors
def main(config_path: str) -> None:
    """gitdeps - 基于 git 地址的依赖解析与锁定工具"""
    setup_logging(
        level=os.getenv("GITDEPS_LOG_LEVEL", "INFO"),
        json_output=os.getenv("GITDEPS_LOG_JSON", "") == "1",
    )
    from gitdeps.core.config import init_config
    if Path(config_path).is_file():
        init_config(config_path)
    reset_container()


# 注册各领域子命令
from gitdeps.cli.cmd_sync import register as _reg_sync  # noqa: E402
from gitdeps.cli.cmd_install import register as _reg_install  # noqa: E402

_reg_sync(main)
_reg_install(main)
