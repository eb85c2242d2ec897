"""Node-style module resolution.

Implements the subset of the Node ``require`` algorithm the plugin needs:
relative and absolute specifiers, bare specifiers looked up through
``node_modules`` directories, ``package.json`` entry fields and ``index``
files.  No symlinks are followed, so a resolved path stays inside the copy it
was found in.
"""

from __future__ import annotations

import json
import os
import stat
from typing import Callable, Optional, Sequence

from nmdedup.exceptions import ResolutionError

IsFile = Callable[[str], bool]

DEFAULT_EXTENSIONS = (".js", ".json")


def is_file_sync(path: str) -> bool:
    """Return True for regular files and FIFOs.

    A missing path is False.  Any other ``OSError`` propagates to the caller.
    """
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return False
    return stat.S_ISREG(st.st_mode) or stat.S_ISFIFO(st.st_mode)


def _is_path_specifier(specifier: str) -> bool:
    return (
        specifier in (".", "..")
        or specifier.startswith(("./", "../"))
        or os.path.isabs(specifier)
    )


class NodeResolver:
    """Resolve module specifiers to absolute file paths.

    Args:
        extensions: Suffixes tried, in order, after the exact path.
        module_dir: Name of the dependency installation directory.
    """

    def __init__(
        self,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        module_dir: str = "node_modules",
    ):
        self.extensions = tuple(extensions)
        self.module_dir = module_dir

    def resolve_sync(
        self,
        specifier: str,
        basedir: Optional[str] = None,
        filename: Optional[str] = None,
        browser_field: Optional[str] = None,
        is_file: Optional[IsFile] = None,
    ) -> str:
        """Resolve ``specifier`` or raise ``ResolutionError``.

        ``basedir`` defaults to the directory of ``filename``, then to the
        current directory.  ``browser_field`` names a ``package.json`` field
        preferred over ``main`` when it holds a string entry.
        """
        if basedir is None:
            basedir = os.path.dirname(filename) if filename else os.getcwd()
        basedir = os.path.abspath(basedir)
        is_file = is_file or is_file_sync

        if not specifier or specifier.startswith("!"):
            raise ResolutionError(specifier, basedir)

        if _is_path_specifier(specifier):
            target = os.path.normpath(os.path.join(basedir, specifier))
            found = self._load_as_file(target, is_file) or self._load_as_directory(
                target, browser_field, is_file
            )
            if found:
                return found
            raise ResolutionError(specifier, basedir)

        for modules_dir in self._node_modules_paths(basedir):
            target = os.path.join(modules_dir, specifier)
            found = self._load_as_file(target, is_file) or self._load_as_directory(
                target, browser_field, is_file
            )
            if found:
                return found

        raise ResolutionError(specifier, basedir)

    def resolve_from_silent(self, basedir: str, specifier: str) -> Optional[str]:
        """Plain ``require``-style resolution; ``None`` when unresolvable."""
        try:
            return self.resolve_sync(specifier, basedir=basedir)
        except (ResolutionError, OSError):
            return None

    def _load_as_file(self, target: str, is_file: IsFile) -> Optional[str]:
        if is_file(target):
            return target
        for ext in self.extensions:
            if is_file(target + ext):
                return target + ext
        return None

    def _load_as_directory(
        self, target: str, browser_field: Optional[str], is_file: IsFile
    ) -> Optional[str]:
        manifest_path = os.path.join(target, "package.json")
        if is_file(manifest_path):
            entry = self._read_entry(manifest_path, browser_field)
            if entry:
                entry_path = os.path.normpath(os.path.join(target, entry))
                found = self._load_as_file(entry_path, is_file) or self._load_index(
                    entry_path, is_file
                )
                if found:
                    return found
        return self._load_index(target, is_file)

    def _load_index(self, target: str, is_file: IsFile) -> Optional[str]:
        for ext in self.extensions:
            candidate = os.path.join(target, "index" + ext)
            if is_file(candidate):
                return candidate
        return None

    @staticmethod
    def _read_entry(manifest_path: str, browser_field: Optional[str]) -> Optional[str]:
        try:
            with open(manifest_path, "r", encoding="utf-8") as fh:
                manifest = json.load(fh)
        except ValueError:
            return None
        if not isinstance(manifest, dict):
            return None
        if browser_field and isinstance(manifest.get(browser_field), str):
            return manifest[browser_field]
        main = manifest.get("main")
        return main if isinstance(main, str) else None

    def _node_modules_paths(self, basedir: str):
        """Yield ``node_modules`` directories from ``basedir`` up to the root."""
        current = basedir
        while True:
            if os.path.basename(current) != self.module_dir:
                yield os.path.join(current, self.module_dir)
            parent = os.path.dirname(current)
            if parent == current:
                return
            current = parent
