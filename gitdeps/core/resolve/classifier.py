"""分支 / 标签判定

只允许标签和 commit sha 作为依赖 ref。出现在分支列表、却不在标签列表里的
ref 视为可变分支并拒绝；唯一例外是 HEAD 正游离在这个 ref 上
（sha 恰好与某个分支同名时据此消歧）。
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from gitdeps.core.exceptions import BranchRefRejectedError
from gitdeps.core.models import BranchSummary

_REMOTE_PREFIX_RE = re.compile(r"^remotes/[^/]+/")


def normalize_branch(name: str) -> str:
    """remotes/origin/main -> main"""
    return _REMOTE_PREFIX_RE.sub("", name.strip())


def is_branch_ref(ref: str, tags: Iterable[str], branches: BranchSummary) -> bool:
    if branches.detached and branches.current == ref:
        return False
    tag_set = set(tags)
    return any(normalize_branch(b) == ref for b in branches.all) and ref not in tag_set


def ensure_not_branch(
    url: str, ref: str, tags: Iterable[str], branches: BranchSummary,
) -> None:
    if is_branch_ref(ref, tags, branches):
        raise BranchRefRejectedError(
            f"{url}: '{ref}' 是分支，不支持分支依赖，请改用语义化版本标签或 commit sha"
        )
