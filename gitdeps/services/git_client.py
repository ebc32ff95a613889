"""Git 客户端：VcsClient 协议的默认实现

所有 git 调用都经由 CommandExecutor，并带单次操作超时。
失败统一转换为 VcsOperationError，超时为 VcsTimeoutError。
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path

from gitdeps.core.exceptions import VcsOperationError, VcsTimeoutError
from gitdeps.core.models import BranchSummary
from gitdeps.utils.logger import redact
from gitdeps.utils.shell import CommandExecutor, CommandResult, LocalExecutor

logger = logging.getLogger(__name__)

# 不弹交互式凭据提示；branch 输出按英文解析
GIT_ENV = {"GIT_TERMINAL_PROMPT": "0", "LC_ALL": "C"}

# "* (HEAD detached at v1.2.0)" / "* (HEAD detached from 3f2a9c1)"
_DETACHED_RE = re.compile(r"^\((?:HEAD )?detached (at|from) (.+)\)$")


class GitClient:
    """基于 git 命令行的版本控制客户端"""

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        *,
        timeout: int = 300,
        git_bin: str = "git",
    ) -> None:
        self._executor = executor or LocalExecutor()
        self.timeout = timeout
        self.git_bin = git_bin

    def _git(self, args: list[str], *, cwd: Path | None = None, label: str = "") -> CommandResult:
        label = label or args[0]
        try:
            r = self._executor.execute(
                [self.git_bin, *args],
                cwd=str(cwd) if cwd else ".",
                env=GIT_ENV,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise VcsTimeoutError(
                redact(f"git {label} 超时 ({self.timeout}s): {' '.join(args)}")
            ) from e
        except OSError as e:
            raise VcsOperationError(f"无法执行 git {label}: {e}") from e
        if not r.success:
            raise VcsOperationError(
                redact(f"git {label} 失败 (rc={r.returncode}): {r.stderr.strip()[:300]}")
            )
        logger.debug("git %s 完成 (%.2fs)", label, r.duration)
        return r

    # ---- 仓库操作 ----

    def clone(self, url: str, dest: Path) -> None:
        dest.parent.mkdir(parents=True, exist_ok=True)
        self._git(["clone", "--quiet", url, str(dest)], label="clone")

    def fetch(self, repo: Path, remote: str = "origin") -> None:
        self._git(["fetch", "--quiet", "--tags", remote], cwd=repo, label="fetch")

    def checkout(self, repo: Path, ref: str) -> None:
        self._git(["checkout", "--quiet", ref], cwd=repo, label="checkout")

    # ---- 查询 ----

    def list_tags(self, repo: Path) -> list[str]:
        r = self._git(["tag", "--list"], cwd=repo, label="tag")
        return [line.strip() for line in r.stdout.splitlines() if line.strip()]

    def list_branches(self, repo: Path) -> BranchSummary:
        r = self._git(["branch", "--all", "--no-color"], cwd=repo, label="branch")
        return parse_branch_output(r.stdout)

    def list_remote_tags(self, url: str) -> list[str]:
        r = self._git(["ls-remote", "--tags", "--refs", url], label="ls-remote")
        tags: list[str] = []
        for line in r.stdout.splitlines():
            _, _, ref = line.partition("\t")
            if ref.startswith("refs/tags/"):
                tags.append(ref[len("refs/tags/"):])
        return tags


def parse_branch_output(output: str) -> BranchSummary:
    """解析 `git branch --all` 输出"""
    summary = BranchSummary()
    for line in output.splitlines():
        if not line.strip():
            continue
        is_current = line.startswith("*")
        name = line[2:].strip()
        if "->" in name:
            # remotes/origin/HEAD -> origin/main
            continue
        m = _DETACHED_RE.match(name)
        if m:
            if is_current:
                summary.detached = True
                summary.current = m.group(2) if m.group(1) == "at" else ""
            continue
        if name.startswith("("):
            continue
        summary.all.append(name)
        if is_current:
            summary.current = name
    return summary
