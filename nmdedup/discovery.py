"""Discovery and loading of duplicate package groups.

A duplicate group is every installed location of the same ``name@version``.
Groups are ordered shallowest-first so the least nested copy becomes the
canonical one.  Discovered groups can be cached on disk, keyed by the project
root and its lockfiles.
"""

from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

import yaml

from nmdedup.exceptions import DuplicateGroupError
from nmdedup.resolve.package_utils import read_manifest
from nmdedup.utils.logger import log_debug, log_info, log_warning

LOCKFILES = ("package-lock.json", "npm-shrinkwrap.json", "yarn.lock", "pnpm-lock.yaml")


def _iter_installed_packages(modules_dir: str, install_marker: str) -> Iterator[Tuple[str, str, str]]:
    """Yield ``(location, name, version)`` for packages under ``modules_dir``."""
    try:
        entries = sorted(os.listdir(modules_dir))
    except FileNotFoundError:
        return

    for entry in entries:
        if entry.startswith("."):
            continue
        path = os.path.join(modules_dir, entry)
        # symlinked installs point outside this tree and may loop
        if os.path.islink(path) or not os.path.isdir(path):
            continue
        if entry.startswith("@"):
            for scoped in sorted(os.listdir(path)):
                scoped_path = os.path.join(path, scoped)
                if not os.path.islink(scoped_path) and os.path.isdir(scoped_path):
                    yield from _visit_package(scoped_path, install_marker)
        else:
            yield from _visit_package(path, install_marker)


def _visit_package(location: str, install_marker: str) -> Iterator[Tuple[str, str, str]]:
    manifest = read_manifest(location)
    if manifest is not None:
        name, version = manifest.get("name"), manifest.get("version")
        if isinstance(name, str) and isinstance(version, str):
            yield location, name, version
    yield from _iter_installed_packages(os.path.join(location, install_marker), install_marker)


def find_duplicated_packages(
    root_path: str, install_marker: str = "node_modules"
) -> Dict[str, List[str]]:
    """Group installed locations by ``name@version``, keeping only duplicates."""
    root = os.path.abspath(root_path)
    locations: Dict[str, List[str]] = {}
    for location, name, version in _iter_installed_packages(
        os.path.join(root, install_marker), install_marker
    ):
        locations.setdefault(f"{name}@{version}", []).append(location)

    duplicates = {
        key: sorted(paths, key=lambda p: (p.count(os.sep), p))
        for key, paths in sorted(locations.items())
        if len(paths) > 1
    }
    log_info(
        "Duplicate packages discovered",
        root=root,
        packages=len(locations),
        duplicated=len(duplicates),
        redundant_copies=sum(len(p) - 1 for p in duplicates.values()),
    )
    return duplicates


def _cache_key(root: str) -> Optional[str]:
    """Hash of the root path and its lockfiles; ``None`` without a lockfile."""
    digest = hashlib.md5(root.encode(), usedforsecurity=False)
    found = False
    for lockfile in LOCKFILES:
        lock_path = Path(root) / lockfile
        if lock_path.is_file():
            digest.update(lockfile.encode())
            digest.update(lock_path.read_bytes())
            found = True
    return digest.hexdigest() if found else None


def get_duplicated_packages(
    root_path: str,
    cache_dir: Optional[str] = None,
    install_marker: str = "node_modules",
    force_rebuild: bool = False,
) -> Dict[str, List[str]]:
    """Like ``find_duplicated_packages`` but cached under ``cache_dir``.

    The cache is only used when the root holds a lockfile, since the lockfile
    contents are what identify an installed tree.
    """
    root = os.path.abspath(root_path)
    key = _cache_key(root) if cache_dir else None
    if key is None:
        return find_duplicated_packages(root, install_marker)

    cache_file = Path(cache_dir) / f"duplicates_{key}.json"
    if not force_rebuild and cache_file.is_file():
        try:
            with open(cache_file, "r", encoding="utf-8") as fh:
                cached = json.load(fh)
            log_debug("Loaded duplicate groups from cache", path=str(cache_file))
            return cached
        except ValueError as exc:
            log_warning("Ignoring unreadable duplicate cache", path=str(cache_file), error=str(exc))

    duplicates = find_duplicated_packages(root, install_marker)
    cache_file.parent.mkdir(parents=True, exist_ok=True)
    with open(cache_file, "w", encoding="utf-8") as fh:
        json.dump(duplicates, fh, indent=2)
    return duplicates


def load_duplicate_groups(path: str) -> Dict[str, List[str]]:
    """Load groups from a YAML or JSON file.

    Accepts a mapping of group key to candidate list, or a bare list of
    candidate lists (keyed by position).
    """
    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}

    if isinstance(raw, list):
        raw = {str(index): group for index, group in enumerate(raw)}
    if not isinstance(raw, dict):
        raise DuplicateGroupError(f"{path}: expected a mapping or list of groups")

    groups: Dict[str, List[str]] = {}
    for key, candidates in raw.items():
        if not isinstance(candidates, list) or not all(isinstance(c, str) for c in candidates):
            raise DuplicateGroupError(f"{path}: group '{key}' must be a list of paths")
        groups[str(key)] = candidates

    log_info("Loaded duplicate groups", path=path, groups=len(groups))
    return groups
