"""ManifestStore 测试"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from gitdeps.core.exceptions import ManifestInvalidError
from gitdeps.services.manifest_store import ManifestStore


class TestReadWrite:
    def test_missing_returns_none(self, tmp_path: Path) -> None:
        assert ManifestStore().read_document(tmp_path / "package.yml") is None

    def test_yaml_keeps_key_order(self, tmp_path: Path) -> None:
        store = ManifestStore()
        path = tmp_path / "package.yml"
        doc = {"type": "application", "name": "演示", "source-directories": ["src"]}
        store.write_document(path, doc)
        assert list(store.read_document(path)) == ["type", "name", "source-directories"]
        assert "演示" in path.read_text(encoding="utf-8")

    def test_json_indent(self, tmp_path: Path) -> None:
        store = ManifestStore(manifest_file="elm.json", git_deps_file="elm-git.json")
        path = tmp_path / "elm-git.json"
        store.write_document(path, {"git-dependencies": {"direct": {}, "indirect": {}}})
        text = path.read_text(encoding="utf-8")
        assert text == json.dumps(
            {"git-dependencies": {"direct": {}, "indirect": {}}}, indent=4,
        ) + "\n"

    def test_bad_json(self, tmp_path: Path) -> None:
        path = tmp_path / "elm.json"
        path.write_text('{"type": ', encoding="utf-8")
        with pytest.raises(ManifestInvalidError, match="JSON 格式错误"):
            ManifestStore(manifest_file="elm.json").read_document(path)

    def test_json_top_level_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "elm.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ManifestInvalidError, match="映射"):
            ManifestStore(manifest_file="elm.json").read_document(path)

    def test_bad_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "package.yml"
        path.write_text("type: [unclosed\n", encoding="utf-8")
        with pytest.raises(ManifestInvalidError, match="YAML 格式错误"):
            ManifestStore().read_document(path)

    def test_unsupported_suffix(self) -> None:
        with pytest.raises(ValueError, match="不支持"):
            ManifestStore(manifest_file="package.toml")

    def test_same_file_for_both_documents(self) -> None:
        with pytest.raises(ValueError, match="同一个文件"):
            ManifestStore(manifest_file="package.yml", git_deps_file="package.yml")

    def test_write_documents(self, tmp_path: Path) -> None:
        store = ManifestStore(git_deps_file="elm-git.json")
        store.write_documents([
            (tmp_path / "elm-git.json", {"git-dependencies": {"direct": {}, "indirect": {}}}),
            (tmp_path / "package.yml", {"type": "application", "source-directories": ["src"]}),
        ])
        assert store.read_package(tmp_path) == {
            "type": "application",
            "source-directories": ["src"],
            "git-dependencies": {"direct": {}, "indirect": {}},
        }


class TestReadPackage:
    def test_merges_documents(self, tmp_path: Path) -> None:
        store = ManifestStore()
        store.write_document(tmp_path / "package.yml", {"type": "library", "git-dependencies": {}})
        store.write_document(tmp_path / "git-deps.yml", {"git-dependencies": {"https://h/a.git": "1.0.0"}})
        assert store.read_package(tmp_path) == {
            "type": "library",
            "git-dependencies": {"https://h/a.git": "1.0.0"},
        }

    def test_only_manifest(self, tmp_path: Path) -> None:
        store = ManifestStore()
        store.write_document(tmp_path / "package.yml", {"type": "library"})
        assert store.read_package(tmp_path) == {"type": "library"}

    def test_none_when_empty_dir(self, tmp_path: Path) -> None:
        assert ManifestStore().read_package(tmp_path) is None
