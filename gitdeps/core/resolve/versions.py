"""语义化版本与版本范围

范围语法只有一种: "LOWER <= v < UPPER"，表示半开区间 [LOWER, UPPER)。
单个精确版本不是范围，作为 git 依赖的 ref 时按精确钉住处理。

精确版本允许带前导 "v" / "=" 和首尾空白（如标签 v1.2.0），
解析结果只用于比较，选中的 ref 始终是标签原文。
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import semver

from gitdeps.core.exceptions import InvalidRangeError

RANGE_SEPARATOR = "<= v <"


def parse_version(text: object) -> semver.Version | None:
    """宽松解析精确版本，不合法返回 None"""
    if not isinstance(text, str):
        return None
    cleaned = text.strip()
    if cleaned.startswith("="):
        cleaned = cleaned[1:].lstrip()
    if cleaned.startswith("v"):
        cleaned = cleaned[1:]
    if not cleaned:
        return None
    try:
        return semver.Version.parse(cleaned)
    except ValueError:
        return None


def is_exact_version(text: object) -> bool:
    return parse_version(text) is not None


@dataclass(frozen=True)
class VersionRange:
    """半开版本区间 [lower, upper)"""

    lower: semver.Version
    upper: semver.Version

    def contains(self, version: semver.Version) -> bool:
        if not self.lower <= version < self.upper:
            return False
        if version.prerelease is None:
            return True
        # 预发布版本只在某个边界本身是同一 major.minor.patch 的预发布时才匹配
        return any(
            bound.prerelease is not None
            and bound.finalize_version() == version.finalize_version()
            for bound in (self.lower, self.upper)
        )

    def __str__(self) -> str:
        return f"{self.lower} {RANGE_SEPARATOR} {self.upper}"


def parse_range(text: object) -> VersionRange:
    """解析 "LOWER <= v < UPPER"

    Raises:
        InvalidRangeError: 形式不符或边界不是精确版本，消息里说明具体原因
    """
    if not isinstance(text, str):
        raise InvalidRangeError(f"版本范围必须是字符串: {text!r}")
    parts = text.split(RANGE_SEPARATOR)
    if len(parts) != 2:
        raise InvalidRangeError(f"不是 'LOWER {RANGE_SEPARATOR} UPPER' 形式: {text!r}")
    lower_text, upper_text = parts
    lower = parse_version(lower_text)
    if lower is None:
        raise InvalidRangeError(f"下界不是合法版本: {lower_text.strip()!r}")
    upper = parse_version(upper_text)
    if upper is None:
        raise InvalidRangeError(f"上界不是合法版本: {upper_text.strip()!r}")
    return VersionRange(lower=lower, upper=upper)


def as_range(text: object) -> VersionRange | None:
    """parse_range 的不抛异常版本"""
    try:
        return parse_range(text)
    except InvalidRangeError:
        return None


def max_satisfying(version_range: VersionRange, tags: Iterable[str]) -> str | None:
    """在标签中选出满足范围的最大版本，返回标签原文"""
    best: tuple[semver.Version, str] | None = None
    for tag in tags:
        version = parse_version(tag)
        if version is None or not version_range.contains(version):
            continue
        if best is None or version > best[0]:
            best = (version, tag)
    return best[1] if best else None


def max_version(tags: Iterable[str]) -> str | None:
    """所有合法版本标签中的最大者，供 install 选默认 ref"""
    best: tuple[semver.Version, str] | None = None
    for tag in tags:
        version = parse_version(tag)
        if version is None or version.prerelease is not None:
            continue
        if best is None or version > best[0]:
            best = (version, tag)
    return best[1] if best else None
