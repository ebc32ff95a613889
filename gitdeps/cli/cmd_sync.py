"""CLI：同步与查看命令"""

from __future__ import annotations

import click

from gitdeps.cli import _svc, handle_errors
from gitdeps.core.models import SyncReport


def register(group: click.Group) -> None:
    group.add_command(sync)
    group.add_command(tree)


def echo_report(report: SyncReport) -> None:
    """输出一次同步的结果"""
    for key, ref in report.resolved:
        click.echo(f"{key} => {ref}")
    for conflict in report.conflicts:
        click.echo(f"警告: {conflict.describe()}", err=True)
    click.echo(
        f"已锁定 {len(report.lock)} 个仓库 "
        f"(直接 {len(report.direct)}, 间接 {len(report.indirect)})"
    )
    if report.source_directories:
        click.echo("源码目录:")
        for src in report.source_directories:
            click.echo(f"  {src}")


@click.command()
@handle_errors
def sync() -> None:
    """解析全部 git 依赖并写回锁定结果"""
    echo_report(_svc().sync.sync())


@click.command()
@handle_errors
def tree() -> None:
    """查看当前锁定结果（不访问网络）"""
    view = _svc().sync.tree()
    for section in ("direct", "indirect"):
        deps = view[section]
        click.echo(f"{section}:")
        if not deps:
            click.echo("  (无)")
        for url, ref in sorted(deps.items()):
            click.echo(f"  {url:50s} {ref}")
    click.echo("source-directories:")
    for src in view["source-directories"]:
        click.echo(f"  {src}")
