# rs_platform/repository/_reconcile.py
# Insert-only merge of a fetched batch into the local store.
# Copyright (c) 2026 ReqresSync contributors
from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ..errors import PersistenceError
from ..models import User
from ..store import LocalStore


def reconcile_and_insert(store: LocalStore, incoming: Iterable[User], *, log: Any = None) -> int:
    """Insert records whose id is not stored yet; return how many were inserted.

    Existing rows are never touched. A store failure stops the batch; rows
    inserted before it stay committed.
    """
    added = 0
    for user in incoming:
        try:
            if store.get(user.id) is not None:
                continue
            store.upsert(user)
        except PersistenceError as e:
            if log is not None:
                log.error(f"reconcile aborted at id={user.id} after {added} inserts: {e.message}")
            raise
        added += 1
        if log is not None:
            log.debug(f"new user added id={user.id}")
    return added


__all__ = ["reconcile_and_insert"]
