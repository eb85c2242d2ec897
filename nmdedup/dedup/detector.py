"""Per-request deduplication decision.

``DeduplicationDetector`` decides, for one resolution request, whether the
request should be rewritten to the canonical copy of the package it resolves
into.  Every failure leaves the request unchanged.
"""

from __future__ import annotations

import os
import threading
from collections import Counter
from typing import Any, Callable, Dict, Optional

from nmdedup.dedup.result import (
    ALREADY_CANONICAL,
    LOADER,
    NO_MATCH,
    OUTSIDE_INSTALL_ROOT,
    PACKAGE_MISMATCH,
    REWRITTEN,
    UNRESOLVED,
    RewriteResult,
)
from nmdedup.resolve.cache import ResolutionCache
from nmdedup.resolve.package_utils import read_package_name as default_read_package_name
from nmdedup.trie import Trie
from nmdedup.utils.logger import log_debug

PackageNameReader = Callable[[str], Optional[str]]


class DeduplicationDetector:
    """Rewrite resolution requests onto canonical package copies.

    Args:
        table: Trie built by ``build_dedup_table``.
        resolution_cache: Shared ``ResolutionCache`` for the build session.
        read_package_name: Returns the manifest name of a package directory.
        install_marker: Path segment that marks a dependency install tree.
        loader_prefix: Requests starting with this are never touched.
        separator: Separator used to search the table.

    Usage::

        detector = DeduplicationDetector(build_dedup_table(groups))
        result = detector.check(record)
        if result.rewritten:
            ...
    """

    def __init__(
        self,
        table: Trie[str],
        resolution_cache: Optional[ResolutionCache] = None,
        read_package_name: PackageNameReader = default_read_package_name,
        install_marker: str = "node_modules",
        loader_prefix: str = "!",
        separator: str = os.sep,
    ):
        self.table = table
        self.resolution_cache = (
            resolution_cache if resolution_cache is not None else ResolutionCache()
        )
        self.read_package_name = read_package_name
        self.install_marker = install_marker
        self.loader_prefix = loader_prefix
        self.separator = separator
        self._stats: Counter = Counter()
        self._lock = threading.Lock()

    def check(self, record: Any) -> RewriteResult:
        """Decide for ``record`` and apply the rewrite in place if any."""
        result = self._decide(record.request, record.context)
        if result.rewritten:
            record.request = result.request
        with self._lock:
            self._stats[result.reason] += 1
        log_debug(
            "Deduplication decision",
            request=record.request,
            reason=result.reason,
            resolved=result.resolved_path,
        )
        return result

    def deduplicate(self, record: Any) -> Optional[Any]:
        """Return the rewritten ``record``, or ``None`` when unchanged."""
        if record is None:
            return None
        return record if self.check(record).rewritten else None

    def _decide(self, request: str, context: str) -> RewriteResult:
        if request.startswith(self.loader_prefix):
            return RewriteResult(rewritten=False, reason=LOADER)

        resolved = self.resolution_cache.resolve(request, context)
        if not resolved:
            return RewriteResult(rewritten=False, reason=UNRESOLVED)

        if not self._in_install_tree(resolved):
            return RewriteResult(
                rewritten=False, reason=OUTSIDE_INSTALL_ROOT, resolved_path=resolved
            )

        match = self.table.search(resolved, self.separator)
        if not match.found:
            return RewriteResult(rewritten=False, reason=NO_MATCH, resolved_path=resolved)

        found, canonical = match.path, match.value
        if found == canonical:
            return RewriteResult(
                rewritten=False,
                reason=ALREADY_CANONICAL,
                resolved_path=resolved,
                matched_path=found,
                canonical_path=canonical,
            )

        # the matched location is a literal prefix of the resolved path
        rewritten = canonical + resolved[len(found):]

        if self._package_name(rewritten) != self._package_name(resolved):
            log_debug(
                "Package identity mismatch, keeping original path",
                resolved=resolved,
                candidate=rewritten,
            )
            return RewriteResult(
                rewritten=False,
                reason=PACKAGE_MISMATCH,
                resolved_path=resolved,
                matched_path=found,
                canonical_path=canonical,
            )

        return RewriteResult(
            rewritten=True,
            reason=REWRITTEN,
            request=rewritten,
            resolved_path=resolved,
            matched_path=found,
            canonical_path=canonical,
        )

    def _in_install_tree(self, path: str) -> bool:
        return self.install_marker in path.split(self.separator)

    def _package_name(self, location: str) -> Optional[str]:
        # table entries are package directories, so the nearest one owns the manifest
        package_location = self.table.search(location, self.separator).path
        return self.read_package_name(package_location)

    def get_stats(self) -> Dict[str, int]:
        """Decision counts per reason code."""
        with self._lock:
            return dict(self._stats)

