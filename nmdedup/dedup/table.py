"""Build the deduplication table from duplicate groups.

The table maps every installed location of a package to the canonical
location of its group, which is the first candidate in the group.  Locations
are normalized before insertion so a stored canonical path always compares
equal to the prefix the trie reports for a path inside it.
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple, Union

from nmdedup.exceptions import DuplicateGroupError
from nmdedup.trie import Trie, build_search_trie, normalize_path
from nmdedup.utils.logger import log_info, log_warning

DuplicateGroups = Union[Mapping[str, Sequence[str]], Iterable[Sequence[str]]]


def _iter_groups(groups: DuplicateGroups) -> Iterable[Sequence[str]]:
    if isinstance(groups, Mapping):
        return groups.values()
    return groups


def prepare_entries(
    groups: DuplicateGroups,
    strict: bool = False,
    separator: str = os.sep,
) -> List[Tuple[str, str]]:
    """Flatten groups into normalized ``(candidate, canonical)`` pairs.

    Overlapping candidates across groups are rejected when ``strict``;
    otherwise the later group wins and a warning is logged.
    """
    entries: List[Tuple[str, str]] = []
    owner: Dict[str, str] = {}

    for candidates in _iter_groups(groups):
        candidates = [normalize_path(c, separator) for c in candidates]
        if not candidates:
            log_warning("Skipping empty duplicate group")
            continue

        best_choice = candidates[0]
        for package_path in candidates:
            previous = owner.get(package_path)
            if previous is not None and previous != best_choice:
                if strict:
                    raise DuplicateGroupError(
                        f"'{package_path}' belongs to groups with canonical paths "
                        f"'{previous}' and '{best_choice}'"
                    )
                log_warning(
                    "Candidate appears in more than one duplicate group; last group wins",
                    path=package_path,
                    previous=previous,
                    canonical=best_choice,
                )
            owner[package_path] = best_choice
            entries.append((package_path, best_choice))

    return entries


def build_dedup_table(
    groups: DuplicateGroups,
    separator: str = os.sep,
    strict: bool = False,
) -> Trie[str]:
    """Create a search trie of ``[path] -> [canonical path]``."""
    entries = prepare_entries(groups, strict=strict, separator=separator)
    trie = build_search_trie(entries, separator)
    log_info("Deduplication table built", entries=len(entries), locations=len(trie))
    return trie
