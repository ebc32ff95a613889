"""ref 解析: 请求值 + 锁定状态 -> 唯一具体 ref

规则（按顺序）:
  1. 请求值不是版本范围 -> 精确钉住，原样返回
  2. 该 url 已有锁定值 -> 返回锁定值；锁定值是合法版本却不满足范围时
     附带一条 VersionConflict（非致命，不重新求解）
  3. 否则在标签中选满足范围的最大版本；没有则 UnresolvableRangeError

tags=None 表示离线解析：规则 3 不执行，返回 ref=None 交给调用方 fetch 后重试。
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from gitdeps.core.exceptions import UnresolvableRangeError
from gitdeps.core.models import VersionConflict
from gitdeps.core.resolve.versions import as_range, max_satisfying, parse_version

SOURCE_PIN = "pin"
SOURCE_LOCK = "lock"
SOURCE_TAGS = "tags"


@dataclass(frozen=True)
class Resolution:
    ref: str | None
    source: str
    conflict: VersionConflict | None = None


def resolve_ref(
    requested: str,
    url: str,
    locks: Mapping[str, str],
    tags: Iterable[str] | None = None,
) -> Resolution:
    version_range = as_range(requested)
    if version_range is None:
        return Resolution(ref=requested, source=SOURCE_PIN)

    locked = locks.get(url)
    if locked:
        conflict = None
        locked_version = parse_version(locked)
        if locked_version is not None and not version_range.contains(locked_version):
            conflict = VersionConflict(url=url, requested=requested, locked=locked)
        return Resolution(ref=locked, source=SOURCE_LOCK, conflict=conflict)

    if tags is None:
        return Resolution(ref=None, source=SOURCE_TAGS)

    tag_list = list(tags)
    best = max_satisfying(version_range, tag_list)
    if best is None:
        raise UnresolvableRangeError(
            f"{url}: 没有标签满足 {requested} "
            f"(共 {len(tag_list)} 个标签)"
        )
    return Resolution(ref=best, source=SOURCE_TAGS)
