"""依赖解析引擎

拆分说明:
- versions.py: 语义化版本与 "LOWER <= v < UPPER" 范围
- locator.py: 仓库地址解析与缓存键
- ref_resolver.py: 请求值 + 锁定状态 -> 具体 ref
- classifier.py: 拒绝可变分支
- context.py: 单次同步的共享状态
- chain.py: 传递依赖遍历
"""

from gitdeps.core.resolve.chain import DependencyChain
from gitdeps.core.resolve.classifier import ensure_not_branch, is_branch_ref
from gitdeps.core.resolve.context import ResolutionContext
from gitdeps.core.resolve.locator import RepoLocator, expand_shorthand, parse_locator
from gitdeps.core.resolve.ref_resolver import Resolution, resolve_ref
from gitdeps.core.resolve.versions import VersionRange, as_range, parse_range, parse_version

__all__ = [
    "DependencyChain",
    "ResolutionContext",
    "RepoLocator",
    "Resolution",
    "VersionRange",
    "as_range",
    "ensure_not_branch",
    "expand_shorthand",
    "is_branch_ref",
    "parse_locator",
    "parse_range",
    "parse_version",
    "resolve_ref",
]
