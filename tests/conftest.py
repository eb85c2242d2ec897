"""Pytest configuration and fixtures for nmdedup tests."""

import json
import os
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from nmdedup.resolve.package_utils import read_package_name  # noqa: E402


def pytest_collection_modifyitems(config, items):
    """Mark tests by directory so ``-m unit`` / ``-m e2e`` select them."""
    for item in items:
        parts = Path(item.path).parts
        if "unit" in parts:
            item.add_marker(pytest.mark.unit)
        elif "e2e" in parts:
            item.add_marker(pytest.mark.e2e)


def make_package(base: Path, name: str, version: str, files=None, **fields) -> Path:
    """Create ``base/<name>`` with a package.json and the given files."""
    location = base / name
    location.mkdir(parents=True, exist_ok=True)
    manifest = {"name": name, "version": version, **fields}
    (location / "package.json").write_text(json.dumps(manifest), encoding="utf-8")
    for rel, content in (files or {}).items():
        target = location / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return location


@pytest.fixture(autouse=True)
def clear_manifest_cache():
    """Manifest names are memoized per directory; reset between tests."""
    read_package_name.cache_clear()
    yield
    read_package_name.cache_clear()


@pytest.fixture
def project_tree(tmp_path):
    """A project with duplicated installs.

    Layout::

        app/
          package.json, package-lock.json
          src/index.js, src/util.js
          node_modules/
            lodash@4.17.21           (canonical)
            shared-utils@1.0.0       (main + module entries)
            @scope/pkg@2.0.0         (canonical)
            a/node_modules/lodash@4.17.21
            a/node_modules/@scope/pkg@2.0.0
            b/node_modules/lodash@4.17.21
            c/node_modules/lodash@3.0.0  (different version)
    """
    root = tmp_path / "app"
    root.mkdir()
    (root / "package.json").write_text(json.dumps({"name": "app", "version": "0.0.0"}))
    (root / "package-lock.json").write_text(json.dumps({"lockfileVersion": 3}))
    (root / "src").mkdir()
    (root / "src" / "index.js").write_text("require('lodash');\n")
    (root / "src" / "util.js").write_text("module.exports = {};\n")

    modules = root / "node_modules"
    lodash_files = {"lodash.js": "// lodash\n", "get.js": "// get\n"}

    lodash = make_package(modules, "lodash", "4.17.21", lodash_files, main="lodash.js")
    shared = make_package(
        modules,
        "shared-utils",
        "1.0.0",
        {"cjs/index.js": "// cjs\n", "esm/index.js": "// esm\n"},
        main="cjs/index.js",
        module="esm/index.js",
    )
    scoped = make_package(modules, "@scope/pkg", "2.0.0", {"index.js": "// pkg\n"})

    a = make_package(modules, "a", "1.0.0", {"index.js": "require('lodash');\n"})
    a_lodash = make_package(a / "node_modules", "lodash", "4.17.21", lodash_files, main="lodash.js")
    a_scoped = make_package(a / "node_modules", "@scope/pkg", "2.0.0", {"index.js": "// pkg\n"})

    b = make_package(modules, "b", "1.0.0", {"index.js": "require('lodash/get');\n"})
    b_lodash = make_package(b / "node_modules", "lodash", "4.17.21", lodash_files, main="lodash.js")

    c = make_package(modules, "c", "1.0.0", {"index.js": "require('lodash');\n"})
    c_lodash = make_package(
        c / "node_modules", "lodash", "3.0.0", {"index.js": "// old lodash\n"}
    )

    return SimpleNamespace(
        root=root,
        modules=modules,
        lodash=lodash,
        shared=shared,
        scoped=scoped,
        a=a,
        a_lodash=a_lodash,
        a_scoped=a_scoped,
        b=b,
        b_lodash=b_lodash,
        c=c,
        c_lodash=c_lodash,
    )


@pytest.fixture
def clean_env(monkeypatch):
    """Remove settings that would leak into ``Config`` from the environment."""
    for key in list(os.environ):
        if key.startswith(("DEDUP_", "RESOLVE_")) or key in ("LOG_LEVEL", "LOG_FORMAT"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
