"""子进程执行工具

GitClient 只依赖 CommandExecutor 协议，测试时注入记录型执行器即可，
无需 patch subprocess。
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    returncode: int
    stdout: str
    stderr: str
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CommandExecutor(Protocol):
    """命令执行器协议

    env 是叠加在当前进程环境之上的增量变量。
    超时由实现方以 subprocess.TimeoutExpired 抛出，调用方负责转换为领域异常。
    """

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        ...


class LocalExecutor:
    """本地子进程执行器（默认实现）"""

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        full_env = {**os.environ, **env} if env else None
        logger.debug("exec: %s (cwd=%s)", " ".join(cmd), cwd)
        start = time.monotonic()
        r = subprocess.run(
            cmd, capture_output=True, text=True,
            cwd=cwd, env=full_env, check=False, timeout=timeout,
        )
        elapsed = time.monotonic() - start
        logger.debug("exit %d (%.2fs): %s", r.returncode, elapsed, cmd[0])
        return CommandResult(
            returncode=r.returncode,
            stdout=r.stdout,
            stderr=r.stderr,
            duration=elapsed,
        )
