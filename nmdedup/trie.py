"""Segment trie over filesystem paths.

Paths are split on a separator into non-empty segments, so ``"1/2/33"`` is
never treated as a prefix of ``"1/2/3345"``.  Lookup returns the deepest
ancestor carrying a value together with the literal prefix of the query that
was consumed to reach it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Generic, Iterable, Iterator, Optional, Tuple, TypeVar

V = TypeVar("V")


@dataclass
class TrieNode(Generic[V]):
    """One path segment.  ``has_value`` distinguishes unset from falsy values."""

    children: Dict[str, "TrieNode[V]"] = field(default_factory=dict)
    value: Optional[V] = None
    has_value: bool = False


@dataclass(frozen=True)
class SearchResult(Generic[V]):
    """Outcome of a longest-ancestor lookup.

    Attributes:
        value: Value of the deepest visited node that carried one, or ``None``.
        path: Prefix of the query consumed up to that node.  ``""`` means no
            visited node carried a value.
    """

    value: Optional[V] = None
    path: str = ""

    @property
    def found(self) -> bool:
        return self.path != ""


class Trie(Generic[V]):
    """Immutable-after-build prefix tree keyed on path segments."""

    def __init__(self, separator: str = "/"):
        if not separator:
            raise ValueError("separator must be a non-empty string")
        self.separator = separator
        self.root: TrieNode[V] = TrieNode()
        self.size = 0

    def _insert(self, path: str, value: V) -> None:
        node = self.root
        for segment, _ in split_segments(path, self.separator):
            child = node.children.get(segment)
            if child is None:
                child = TrieNode()
                node.children[segment] = child
            node = child
        if not node.has_value:
            self.size += 1
        node.value = value
        node.has_value = True

    def search(self, query: str, separator: Optional[str] = None) -> SearchResult[V]:
        """Return the deepest valued ancestor of ``query``."""
        separator = separator or self.separator
        node = self.root
        last_value: Optional[V] = None
        last_end = 0
        found = False

        for segment, end in split_segments(query, separator):
            node = node.children.get(segment)
            if node is None:
                break
            if node.has_value:
                last_value = node.value
                last_end = end
                found = True

        if not found:
            return SearchResult()
        return SearchResult(value=last_value, path=query[:last_end])

    def __contains__(self, path: str) -> bool:
        return self.search(path).path == path

    def __len__(self) -> int:
        return self.size


def split_segments(text: str, separator: str) -> Iterator[Tuple[str, int]]:
    """Yield ``(segment, end_offset)`` for each non-empty segment of ``text``."""
    start = 0
    for piece in text.split(separator):
        end = start + len(piece)
        if piece:
            yield piece, end
        start = end + len(separator)


def normalize_path(path: str, separator: str = "/") -> str:
    """Rewrite ``path`` in the form ``search`` reports consumed prefixes in.

    Empty and ``.`` segments are dropped and ``..`` removes the segment
    before it.  A leading separator is kept; a trailing one is not.
    """
    absolute = path.startswith(separator)
    segments = []
    for segment, _ in split_segments(path, separator):
        if segment == ".":
            continue
        if segment == "..":
            if segments and segments[-1] != "..":
                segments.pop()
                continue
            if absolute:
                continue
        segments.append(segment)
    return (separator if absolute else "") + separator.join(segments)


def build_search_trie(entries: Iterable[Tuple[str, V]], separator: str = "/") -> Trie[V]:
    """Build a trie from ``(path, value)`` pairs.

    A later entry with the same segment path overwrites an earlier one.
    """
    trie: Trie[V] = Trie(separator)
    for path, value in entries:
        trie._insert(path, value)
    return trie


def search_trie(trie: Trie[V], query: str, separator: Optional[str] = None) -> SearchResult[V]:
    """Longest-ancestor lookup; ``separator`` defaults to the trie's own."""
    return trie.search(query, separator)
