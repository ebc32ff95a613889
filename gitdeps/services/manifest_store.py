"""清单文件存储

按文件后缀选择编解码:
  - .json          json，缩进 4 空格
  - .yml / .yaml   YAML（load_yaml / save_yaml）

两种格式都原子写入，顶层键顺序保持不变，未识别的字段原样写回。
一个包由两份文档组成：主清单 + git 依赖文件，读取时合并为一个映射
（git 依赖文件中的同名键优先）。
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from gitdeps.core.exceptions import ManifestInvalidError
from gitdeps.utils.yaml_io import atomic_write, atomic_write_all, dump_yaml, load_yaml, save_yaml

logger = logging.getLogger(__name__)

_JSON_SUFFIXES = frozenset((".json",))
_YAML_SUFFIXES = frozenset((".yml", ".yaml"))


class ManifestStore:
    """主清单 + git 依赖文件的读写"""

    def __init__(
        self,
        manifest_file: str = "package.yml",
        git_deps_file: str = "git-deps.yml",
    ) -> None:
        for name in (manifest_file, git_deps_file):
            if Path(name).suffix not in _JSON_SUFFIXES | _YAML_SUFFIXES:
                raise ValueError(f"不支持的清单文件格式: {name}")
        if Path(manifest_file) == Path(git_deps_file):
            raise ValueError(f"主清单与 git 依赖文件不能是同一个文件: {manifest_file}")
        self.manifest_file = manifest_file
        self.git_deps_file = git_deps_file

    # ---- 单个文档 ----

    def read_document(self, path: Path) -> dict[str, Any] | None:
        """读取单个文档，不存在返回 None

        Raises:
            ManifestInvalidError: 文件无法解析或顶层不是映射
        """
        if not path.is_file():
            return None
        if path.suffix in _JSON_SUFFIXES:
            try:
                data = json.loads(path.read_text(encoding="utf-8") or "{}")
            except json.JSONDecodeError as e:
                raise ManifestInvalidError(
                    f"JSON 格式错误 (第 {e.lineno} 行, 第 {e.colno} 列): {e.msg}",
                    origin=str(path),
                ) from e
            if not isinstance(data, dict):
                raise ManifestInvalidError("顶层必须是映射", origin=str(path))
            return data
        try:
            return load_yaml(path)
        except yaml.YAMLError as e:
            raise ManifestInvalidError(f"YAML 格式错误: {e}", origin=str(path)) from e
        except ValueError as e:
            raise ManifestInvalidError(str(e), origin=str(path)) from e

    def write_document(self, path: Path, doc: dict[str, Any]) -> None:
        if path.suffix in _JSON_SUFFIXES:
            atomic_write(path, _render_json(doc))
        else:
            save_yaml(path, doc)
        logger.debug("已写入: %s", path)

    def write_documents(self, docs: list[tuple[Path, dict[str, Any]]]) -> None:
        """一次写入多份文档：全部序列化并写好临时文件后才替换目标"""
        rendered = [
            (path, _render_json(doc) if path.suffix in _JSON_SUFFIXES else dump_yaml(doc))
            for path, doc in docs
        ]
        atomic_write_all(rendered)
        logger.debug("已写入: %s", ", ".join(str(path) for path, _ in docs))

    # ---- 包（两份文档） ----

    def manifest_path(self, package_dir: Path) -> Path:
        return package_dir / self.manifest_file

    def git_deps_path(self, package_dir: Path) -> Path:
        return package_dir / self.git_deps_file

    def read_package(self, package_dir: Path) -> dict[str, Any] | None:
        """读取并合并一个包的两份文档，两者都不存在返回 None"""
        manifest = self.read_document(self.manifest_path(package_dir))
        git_deps = self.read_document(self.git_deps_path(package_dir))
        if manifest is None and git_deps is None:
            return None
        return {**(manifest or {}), **(git_deps or {})}


def _render_json(doc: dict[str, Any]) -> str:
    return json.dumps(doc, indent=4, ensure_ascii=False) + "\n"
