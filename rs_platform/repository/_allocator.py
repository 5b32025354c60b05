# rs_platform/repository/_allocator.py
from __future__ import annotations

from collections.abc import Iterable

from ..store import LocalStore


def first_gap(sorted_ids: Iterable[int]) -> int:
    # Smallest non-negative id missing from the contiguous run starting at 0.
    nxt = 0
    for i in sorted_ids:
        if i < nxt:
            continue
        if i == nxt:
            nxt += 1
        else:
            break
    return nxt


def next_available_id(store: LocalStore) -> int:
    return first_gap(store.all_ids())


__all__ = ["first_gap", "next_available_id"]
