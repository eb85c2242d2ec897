"""Unit tests for duplicate-group discovery and loading."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from nmdedup.discovery import (
    find_duplicated_packages,
    get_duplicated_packages,
    load_duplicate_groups,
)
from nmdedup.exceptions import DuplicateGroupError


class TestFindDuplicatedPackages:
    def test_groups_by_name_and_version(self, project_tree):
        duplicates = find_duplicated_packages(str(project_tree.root))

        assert set(duplicates) == {"lodash@4.17.21", "@scope/pkg@2.0.0"}
        assert duplicates["lodash@4.17.21"] == [
            str(project_tree.lodash),
            str(project_tree.a_lodash),
            str(project_tree.b_lodash),
        ]
        assert duplicates["@scope/pkg@2.0.0"] == [
            str(project_tree.scoped),
            str(project_tree.a_scoped),
        ]

    def test_different_versions_are_not_duplicates(self, project_tree):
        duplicates = find_duplicated_packages(str(project_tree.root))
        assert str(project_tree.c_lodash) not in duplicates["lodash@4.17.21"]

    def test_canonical_is_shallowest(self, project_tree):
        duplicates = find_duplicated_packages(str(project_tree.root))
        for candidates in duplicates.values():
            depths = [c.count("node_modules") for c in candidates]
            assert depths == sorted(depths)

    def test_missing_node_modules(self, tmp_path):
        assert find_duplicated_packages(str(tmp_path)) == {}


class TestGetDuplicatedPackages:
    def test_cache_written_and_reused(self, project_tree, tmp_path):
        cache_dir = tmp_path / "cache"

        first = get_duplicated_packages(str(project_tree.root), cache_dir=str(cache_dir))
        assert len(list(cache_dir.glob("duplicates_*.json"))) == 1

        with patch("nmdedup.discovery.find_duplicated_packages") as find:
            second = get_duplicated_packages(str(project_tree.root), cache_dir=str(cache_dir))
        find.assert_not_called()
        assert second == first

    def test_lockfile_change_invalidates(self, project_tree, tmp_path):
        cache_dir = tmp_path / "cache"
        get_duplicated_packages(str(project_tree.root), cache_dir=str(cache_dir))

        (project_tree.root / "package-lock.json").write_text(json.dumps({"lockfileVersion": 4}))
        get_duplicated_packages(str(project_tree.root), cache_dir=str(cache_dir))

        assert len(list(cache_dir.glob("duplicates_*.json"))) == 2

    def test_force_rebuild(self, project_tree, tmp_path):
        cache_dir = tmp_path / "cache"
        get_duplicated_packages(str(project_tree.root), cache_dir=str(cache_dir))

        with patch("nmdedup.discovery.find_duplicated_packages", return_value={}) as find:
            result = get_duplicated_packages(
                str(project_tree.root), cache_dir=str(cache_dir), force_rebuild=True
            )
        find.assert_called_once()
        assert result == {}

    def test_no_lockfile_no_cache(self, project_tree, tmp_path):
        (project_tree.root / "package-lock.json").unlink()
        cache_dir = tmp_path / "cache"

        get_duplicated_packages(str(project_tree.root), cache_dir=str(cache_dir))
        assert not cache_dir.exists()

    def test_unreadable_cache_is_rebuilt(self, project_tree, tmp_path):
        cache_dir = tmp_path / "cache"
        get_duplicated_packages(str(project_tree.root), cache_dir=str(cache_dir))
        cache_file = next(cache_dir.glob("duplicates_*.json"))
        cache_file.write_text("{broken")

        result = get_duplicated_packages(str(project_tree.root), cache_dir=str(cache_dir))
        assert "lodash@4.17.21" in result
        assert json.loads(cache_file.read_text()) == result


class TestLoadDuplicateGroups:
    def test_yaml_mapping(self, tmp_path):
        path = tmp_path / "groups.yaml"
        path.write_text(
            "lodash@4.17.21:\n"
            "  - /app/node_modules/lodash\n"
            "  - /app/node_modules/a/node_modules/lodash\n"
        )
        assert load_duplicate_groups(str(path)) == {
            "lodash@4.17.21": [
                "/app/node_modules/lodash",
                "/app/node_modules/a/node_modules/lodash",
            ]
        }

    def test_json_list(self, tmp_path):
        path = tmp_path / "groups.json"
        path.write_text(json.dumps([["A", "B"], ["C", "D"]]))
        assert load_duplicate_groups(str(path)) == {"0": ["A", "B"], "1": ["C", "D"]}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "groups.yaml"
        path.write_text("")
        assert load_duplicate_groups(str(path)) == {}

    @pytest.mark.parametrize("content", ["just a string", "key: value", "- [1, 2]"])
    def test_invalid_content(self, tmp_path, content):
        path = tmp_path / "groups.yaml"
        path.write_text(content)
        with pytest.raises(DuplicateGroupError):
            load_duplicate_groups(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_duplicate_groups(str(Path(tmp_path) / "missing.yaml"))
