"""清单结构校验

按 type 字段选择两套规则:

  application:
    dependencies.direct / .indirect       {author/project: 精确版本}
    git-dependencies.direct / .indirect   {仓库地址: ref 或范围}
    source-directories                    [路径, ...]

  library:
    dependencies                          {author/project: 版本范围}
    git-dependencies (可选)               {仓库地址: ref 或范围}
    source-directories (可选)             [路径, ...]，缺省为 ["src"]

check_manifest() 返回第一条违规说明，全部通过返回 None；
validate_manifest() 在违规时抛 ManifestInvalidError，
git 依赖的键不是合法仓库地址时抛 LocatorInvalidError。
校验在任何网络 / 文件系统写操作之前执行。
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from gitdeps.core.exceptions import LocatorInvalidError, ManifestInvalidError
from gitdeps.core.models import (
    APPLICATION,
    DEPENDENCIES_KEY,
    GIT_DEPENDENCIES_KEY,
    LIBRARY,
    MANIFEST_KINDS,
    SOURCE_DIRS_KEY,
    TYPE_KEY,
)
from gitdeps.core.resolve.locator import parse_locator
from gitdeps.core.resolve.versions import as_range, is_exact_version

_PROJECT_NAME_RE = re.compile(r"^[\w-]+/[\w-]+$")


@dataclass(frozen=True)
class Violation:
    message: str
    bad_locator: bool = False


def _is_mapping(value: Any) -> bool:
    return isinstance(value, dict)


def find_violation(doc: Any) -> Violation | None:
    if not _is_mapping(doc):
        return Violation("清单顶层必须是映射")
    kind = doc.get(TYPE_KEY)
    if kind == APPLICATION:
        return _check_application(doc)
    if kind == LIBRARY:
        return _check_library(doc)
    return Violation(
        f"'{TYPE_KEY}' 字段必须是 {' / '.join(MANIFEST_KINDS)} 之一，实际为 {kind!r}"
    )


def check_manifest(doc: Any) -> str | None:
    violation = find_violation(doc)
    return violation.message if violation else None


def validate_manifest(doc: Any, *, expected: str = "", origin: str = "") -> None:
    """校验清单，expected 非空时同时要求 type 与之一致"""
    if expected and _is_mapping(doc) and doc.get(TYPE_KEY) != expected:
        raise ManifestInvalidError(
            f"'{TYPE_KEY}' 字段必须是 '{expected}'，实际为 {doc.get(TYPE_KEY)!r}",
            origin=origin,
        )
    violation = find_violation(doc)
    if violation is None:
        return
    if violation.bad_locator:
        prefix = f"{origin}: " if origin else ""
        raise LocatorInvalidError(prefix + violation.message)
    raise ManifestInvalidError(violation.message, origin=origin)


# ---------------------------------------------------------------------------
# application
# ---------------------------------------------------------------------------

def _check_application(doc: dict[str, Any]) -> Violation | None:
    deps = doc.get(DEPENDENCIES_KEY)
    if not _is_mapping(deps):
        return Violation(f"'{DEPENDENCIES_KEY}' 字段必须是包含 direct / indirect 的映射")
    for section in ("direct", "indirect"):
        err = _check_name_map(
            deps.get(section), f"{DEPENDENCIES_KEY}.{section}",
            "精确版本", is_exact_version,
        )
        if err:
            return err

    git_deps = doc.get(GIT_DEPENDENCIES_KEY)
    if git_deps is None:
        return Violation(f"缺少 '{GIT_DEPENDENCIES_KEY}' 字段（可先执行 gitdeps init）")
    if not _is_mapping(git_deps):
        return Violation(f"'{GIT_DEPENDENCIES_KEY}' 字段必须是包含 direct / indirect 的映射")
    for section in ("direct", "indirect"):
        err = _check_git_map(git_deps.get(section), f"{GIT_DEPENDENCIES_KEY}.{section}")
        if err:
            return err

    return _check_sources(doc.get(SOURCE_DIRS_KEY), required=True)


# ---------------------------------------------------------------------------
# library
# ---------------------------------------------------------------------------

def _check_library(doc: dict[str, Any]) -> Violation | None:
    err = _check_name_map(
        doc.get(DEPENDENCIES_KEY), DEPENDENCIES_KEY,
        "版本范围 (LOWER <= v < UPPER)", lambda v: as_range(v) is not None,
    )
    if err:
        return err

    git_deps = doc.get(GIT_DEPENDENCIES_KEY)
    if git_deps is not None:
        err = _check_git_map(git_deps, GIT_DEPENDENCIES_KEY)
        if err:
            return err

    return _check_sources(doc.get(SOURCE_DIRS_KEY), required=False, confined=True)


# ---------------------------------------------------------------------------
# 通用规则
# ---------------------------------------------------------------------------

def _check_name_map(
    value: Any, field_name: str, expect: str, valid: Callable[[Any], bool],
) -> Violation | None:
    err = f"'{field_name}' 必须是 author/project -> {expect} 的映射"
    if not _is_mapping(value):
        return Violation(err)
    for name, version in value.items():
        if not isinstance(name, str) or not _PROJECT_NAME_RE.match(name):
            return Violation(f"{err}，非法包名: {name!r}")
        if not valid(version):
            return Violation(f"{err}，{name} 的取值非法: {version!r}")
    return None


def _check_git_map(value: Any, field_name: str) -> Violation | None:
    err = f"'{field_name}' 必须是 仓库地址 -> ref 或版本范围 的映射"
    if not _is_mapping(value):
        return Violation(err)
    for url, ref in value.items():
        try:
            parse_locator(url)
        except LocatorInvalidError as e:
            return Violation(f"'{field_name}' 中的键不是合法仓库地址: {e}", bad_locator=True)
        if not isinstance(ref, str) or not ref.strip():
            return Violation(f"{err}，{url} 的 ref 为空")
    return None


def _check_sources(value: Any, *, required: bool, confined: bool = False) -> Violation | None:
    """confined: 条目必须是包内相对路径（依赖的源码目录会被改写到其缓存目录下）"""
    if value is None and not required:
        return None
    err = f"'{SOURCE_DIRS_KEY}' 必须是路径字符串列表"
    if not isinstance(value, list):
        return Violation(err)
    for item in value:
        if not isinstance(item, str) or not item.strip():
            return Violation(f"{err}，非法条目: {item!r}")
        if confined and _escapes_package(item):
            return Violation(f"'{SOURCE_DIRS_KEY}' 条目必须是包内相对路径: {item!r}")
    return None


def _escapes_package(src: str) -> bool:
    path = src.replace("\\", "/")
    if path.startswith("/") or re.match(r"^[A-Za-z]:", path):
        return True
    return ".." in path.split("/")
