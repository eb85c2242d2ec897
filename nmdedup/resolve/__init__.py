"""Module resolution collaborators: resolver, memoizing cache, manifest reader."""

from nmdedup.resolve.cache import ResolutionCache
from nmdedup.resolve.node_resolver import NodeResolver, is_file_sync
from nmdedup.resolve.package_utils import read_manifest, read_package_name

__all__ = [
    "NodeResolver",
    "ResolutionCache",
    "is_file_sync",
    "read_manifest",
    "read_package_name",
]
