"""Mutable resolution request record."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ResolveRequest:
    """A module resolution event.

    Attributes:
        request: Raw module specifier.  Rewritten in place when deduplicated.
        context: Directory the specifier is resolved from.
    """

    request: str
    context: str
