"""CLI：初始化与安装命令"""

from __future__ import annotations

import click

from gitdeps.cli import _svc, handle_errors
from gitdeps.cli.cmd_sync import echo_report


def register(group: click.Group) -> None:
    group.add_command(init)
    group.add_command(install)


@click.command()
@handle_errors
def init() -> None:
    """生成空的 git 依赖文件"""
    path = _svc().sync.init()
    click.echo(f"已生成: {path}")


@click.command()
@click.argument("locator")
@click.argument("ref", required=False, default=None)
@handle_errors
def install(locator: str, ref: str | None) -> None:
    """新增直接 git 依赖并同步（LOCATOR 可为完整地址或 owner/repo）"""
    echo_report(_svc().sync.install(locator, ref))
