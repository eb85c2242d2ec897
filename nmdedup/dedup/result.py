"""Data classes for deduplication decisions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

LOADER = "loader"
UNRESOLVED = "unresolved"
OUTSIDE_INSTALL_ROOT = "outside_install_root"
NO_MATCH = "no_match"
ALREADY_CANONICAL = "already_canonical"
PACKAGE_MISMATCH = "package_mismatch"
REWRITTEN = "rewritten"

REASONS = (
    LOADER,
    UNRESOLVED,
    OUTSIDE_INSTALL_ROOT,
    NO_MATCH,
    ALREADY_CANONICAL,
    PACKAGE_MISMATCH,
    REWRITTEN,
)


@dataclass
class RewriteResult:
    """Result of one deduplication decision.

    Attributes:
        rewritten: Whether the request should point at the canonical copy.
        reason: Machine-readable reason code (one of ``REASONS``).
        request: Rewritten absolute path when ``rewritten`` is True.
        resolved_path: Absolute path the original request resolved to.
        matched_path: Installed location matched in the table.
        canonical_path: Canonical location of the matched group.
    """

    rewritten: bool
    reason: str
    request: Optional[str] = None
    resolved_path: Optional[str] = None
    matched_path: Optional[str] = None
    canonical_path: Optional[str] = None

    def __post_init__(self):
        if self.reason not in REASONS:
            raise ValueError(f"Unknown rewrite reason: {self.reason!r}")
        if self.rewritten and not self.request:
            raise ValueError("A rewritten result needs the rewritten request")
