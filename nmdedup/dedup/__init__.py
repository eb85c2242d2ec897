"""Deduplication table and per-request rewrite decisions."""

from nmdedup.dedup.detector import DeduplicationDetector
from nmdedup.dedup.request import ResolveRequest
from nmdedup.dedup.result import RewriteResult
from nmdedup.dedup.table import build_dedup_table, prepare_entries

__all__ = [
    "DeduplicationDetector",
    "ResolveRequest",
    "RewriteResult",
    "build_dedup_table",
    "prepare_entries",
]
