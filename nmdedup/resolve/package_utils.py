"""Helpers for reading installed package manifests."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from typing import Any, Dict, Optional

MANIFEST_NAME = "package.json"


def read_manifest(directory: str) -> Optional[Dict[str, Any]]:
    """Load ``directory/package.json``; ``None`` when missing or invalid."""
    if not directory:
        return None
    try:
        with open(os.path.join(directory, MANIFEST_NAME), "r", encoding="utf-8") as fh:
            manifest = json.load(fh)
    except (OSError, ValueError):
        return None
    return manifest if isinstance(manifest, dict) else None


@lru_cache(maxsize=None)
def read_package_name(directory: str) -> Optional[str]:
    """Return the ``name`` declared by the manifest in ``directory``."""
    manifest = read_manifest(directory)
    if manifest is None:
        return None
    name = manifest.get("name")
    return name if isinstance(name, str) else None
