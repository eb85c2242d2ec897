"""Memoized module resolution for one build session.

A build issues tens of thousands of resolutions that check the same files over
and over.  ``ResolutionCache`` memoizes both the resolution results per
``(request, context)`` and the file-existence checks per path.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from nmdedup.cache import MemoryCacheBackend
from nmdedup.resolve.node_resolver import NodeResolver, is_file_sync
from nmdedup.utils.logger import log_debug


class ResolutionCache:
    """Resolve ``(request, context)`` pairs, never raising.

    The primary path resolves ``request`` from ``context`` honouring the
    browser field, then resolves the result again using itself as the anchor
    filename.  If either stage fails the resolver's plain fallback is used; if
    that fails too the result is ``None``.

    Args:
        resolver: Object providing ``resolve_sync`` and ``resolve_from_silent``.
            Defaults to a ``NodeResolver``.
        browser_field: Manifest field used as the browser entry point.
        max_size: Bound on each memo table; 0 keeps everything.
    """

    def __init__(
        self,
        resolver: Optional[Any] = None,
        browser_field: Optional[str] = "module",
        max_size: int = 0,
    ):
        self.resolver = resolver if resolver is not None else NodeResolver()
        self.browser_field = browser_field
        self._resolved = MemoryCacheBackend(max_size=max_size, name="resolutions")
        self._files = MemoryCacheBackend(max_size=max_size, name="file_checks")

    def is_file(self, path: str) -> bool:
        """Memoized file check.  Errors other than a missing path propagate."""
        return self._files.get_or_compute(path, lambda: is_file_sync(path))

    def resolve(self, request: str, context: str) -> Optional[str]:
        """Resolved absolute path for ``request`` from ``context``, or ``None``."""
        return self._resolved.get_or_compute(
            (request, context), lambda: self._resolve_uncached(request, context)
        )

    def _resolve_uncached(self, request: str, context: str) -> Optional[str]:
        try:
            first = self.resolver.resolve_sync(
                request,
                basedir=context,
                browser_field=self.browser_field,
                is_file=self.is_file,
            )
            return self.resolver.resolve_sync(
                first, filename=first, is_file=self.is_file
            )
        except Exception as exc:
            log_debug(
                "Primary resolution failed, using fallback",
                request=request,
                context=context,
                error=str(exc),
            )

        return self.resolver.resolve_from_silent(context, request)

    def get_stats(self) -> Dict[str, Any]:
        """Statistics for both memo tables."""
        return {
            "resolutions": self._resolved.get_stats(),
            "file_checks": self._files.get_stats(),
        }
