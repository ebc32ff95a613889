"""统一异常体系

所有业务异常继承 GitDepsError，每个子类带一个稳定的 code，
CLI 层据此输出 "[CODE] 消息" 形式的友好提示。

致命性约定:
  - 校验类（ManifestInvalid / LocatorInvalid）在任何写操作之前抛出
  - 解析 / VCS 类在遍历中途抛出，已完成的本地缓存保持原样
  - 版本冲突不是异常，见 models.VersionConflict
"""

from __future__ import annotations


class GitDepsError(Exception):
    """框架基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(GitDepsError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ManifestInvalidError(GitDepsError):
    """清单结构校验失败"""

    code = "MANIFEST_INVALID"

    def __init__(self, message: str, origin: str = "") -> None:
        super().__init__(f"{origin}: {message}" if origin else message)
        self.origin = origin
        self.reason = message


class LocatorInvalidError(GitDepsError):
    """git 依赖的键不是可解析的仓库地址"""

    code = "LOCATOR_INVALID"


class InvalidRangeError(GitDepsError):
    """字符串不是 'LOWER <= v < UPPER' 形式的版本范围"""

    code = "RANGE_INVALID"


class UnresolvableRangeError(GitDepsError):
    """没有任何标签满足请求的版本范围"""

    code = "UNRESOLVABLE_RANGE"


class BranchRefRejectedError(GitDepsError):
    """解析出的 ref 是可变分支"""

    code = "BRANCH_REF_REJECTED"


class VcsOperationError(GitDepsError):
    """git 子进程执行失败"""

    code = "VCS_FAILED"


class VcsTimeoutError(VcsOperationError):
    """git 子进程超时"""

    code = "VCS_TIMEOUT"


class ResolutionCancelledError(GitDepsError):
    """解析过程被外部取消"""

    code = "CANCELLED"


class AlreadyInstalledError(GitDepsError):
    """install 的目标已是直接依赖"""

    code = "ALREADY_INSTALLED"
