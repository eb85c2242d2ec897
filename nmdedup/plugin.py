"""Plugin facade wiring discovery, the table and the detector together.

A build tool calls ``before_resolve`` for every module resolution event.
Returning the record means "resolve this rewritten request instead";
returning ``None`` means "leave it alone".
"""

from __future__ import annotations

import os
import threading
from typing import Any, Dict, Optional, Union

from nmdedup.config import Config, get_config
from nmdedup.dedup.detector import DeduplicationDetector
from nmdedup.dedup.table import DuplicateGroups, build_dedup_table
from nmdedup.discovery import get_duplicated_packages, load_duplicate_groups
from nmdedup.resolve.cache import ResolutionCache
from nmdedup.resolve.node_resolver import NodeResolver
from nmdedup.trie import Trie
from nmdedup.utils.logger import log_dedup_progress


class DeduplicationPlugin:
    """Rewrite module requests onto canonical copies of duplicated packages.

    Args:
        root_path: Project root.  Defaults to ``DEDUP_ROOT_PATH``.
        cache_dir: Cache directory for discovered groups.  Defaults to
            ``DEDUP_CACHE_DIR``.
        groups: Explicit duplicate groups; skips file loading and discovery.
        config: Settings; defaults to the global ``Config``.
    """

    def __init__(
        self,
        root_path: Optional[str] = None,
        cache_dir: Optional[str] = None,
        groups: Optional[DuplicateGroups] = None,
        config: Optional[Config] = None,
    ):
        self.config = config or get_config()
        self.root_path = root_path or self.config.dedup_root_path
        self.cache_dir = cache_dir or self.config.dedup_cache_dir
        self._groups = groups
        self._detector: Optional[DeduplicationDetector] = None
        self._lock = threading.Lock()

    def load_groups(self) -> DuplicateGroups:
        """Explicit groups, else the configured groups file, else discovery."""
        if self._groups is not None:
            return self._groups
        if self.config.dedup_groups_file:
            return load_duplicate_groups(self.config.dedup_groups_file)
        return get_duplicated_packages(
            self.root_path,
            cache_dir=self.cache_dir,
            install_marker=self.config.dedup_install_marker,
            force_rebuild=self.config.dedup_force_rebuild,
        )

    @property
    def detector(self) -> DeduplicationDetector:
        """Detector for this build session, built on first use."""
        if self._detector is None:
            with self._lock:
                if self._detector is None:
                    self._detector = self._build_detector()
        return self._detector

    def _build_detector(self) -> DeduplicationDetector:
        log_dedup_progress("Loading duplicate groups", root=self.root_path)
        groups = self.load_groups()
        table = build_dedup_table(groups, strict=self.config.dedup_strict_groups)
        cache = ResolutionCache(
            resolver=NodeResolver(
                extensions=self.config.get_extensions(),
                module_dir=self.config.dedup_install_marker,
            ),
            browser_field=self.config.dedup_browser_field or None,
            max_size=self.config.resolve_cache_max_size,
        )
        log_dedup_progress("Deduplication ready", locations=len(table))
        return DeduplicationDetector(
            table,
            resolution_cache=cache,
            install_marker=self.config.dedup_install_marker,
            loader_prefix=self.config.dedup_loader_prefix,
            separator=os.sep,
        )

    def before_resolve(self, record: Any) -> Optional[Any]:
        """Hook body: the rewritten record, or ``None`` when unchanged."""
        return self.detector.deduplicate(record)

    def get_stats(self) -> Dict[str, Any]:
        """Decision counts and cache statistics for this session."""
        if self._detector is None:
            return {}
        return {
            "decisions": self._detector.get_stats(),
            "cache": self._detector.resolution_cache.get_stats(),
        }



# Session resolution cache shared by module-level ``deduplicate`` calls
_session_cache: Optional[ResolutionCache] = None
_session_lock = threading.Lock()


def get_session_cache() -> ResolutionCache:
    """Resolution cache reused by every ``deduplicate`` call in this process."""
    global _session_cache
    if _session_cache is None:
        with _session_lock:
            if _session_cache is None:
                _session_cache = ResolutionCache()
    return _session_cache


def reset_session_cache() -> None:
    """Forget memoized resolutions, for example when a new build starts."""
    global _session_cache
    with _session_lock:
        _session_cache = None


def deduplicate(
    record: Any,
    groups: Union[DuplicateGroups, Trie[str]],
    resolution_cache: Optional[ResolutionCache] = None,
    **detector_kwargs: Any,
) -> Optional[Any]:
    """One-shot decision for ``record``.

    ``groups`` may be raw duplicate groups or a table already built with
    ``build_dedup_table``; passing the table avoids rebuilding it per call.
    Resolutions go through ``resolution_cache``, or the session cache when
    none is given.  Remaining keyword arguments go to the detector.
    """
    if isinstance(groups, Trie):
        table = groups
    else:
        table = build_dedup_table(groups, separator=detector_kwargs.get("separator", os.sep))
    if resolution_cache is None:
        resolution_cache = get_session_cache()
    detector = DeduplicationDetector(table, resolution_cache=resolution_cache, **detector_kwargs)
    return detector.deduplicate(record)
