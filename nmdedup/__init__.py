"""Collapse duplicated node_modules installs onto one canonical copy.

Module resolution requests that land in a redundant copy of a package are
rewritten to the same file inside the canonical copy of that package.
"""

from nmdedup.dedup import (
    DeduplicationDetector,
    ResolveRequest,
    RewriteResult,
    build_dedup_table,
)
from nmdedup.plugin import (
    DeduplicationPlugin,
    deduplicate,
    get_session_cache,
    reset_session_cache,
)
from nmdedup.resolve import ResolutionCache
from nmdedup.trie import SearchResult, Trie, build_search_trie, search_trie

__all__ = [
    "DeduplicationDetector",
    "DeduplicationPlugin",
    "ResolutionCache",
    "ResolveRequest",
    "RewriteResult",
    "SearchResult",
    "Trie",
    "build_dedup_table",
    "build_search_trie",
    "deduplicate",
    "get_session_cache",
    "reset_session_cache",
    "search_trie",
]
