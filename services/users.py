# services/users.py
# ReqresSync - user list service sitting between the HTTP surface and the repository.
# Copyright (c) 2026 ReqresSync contributors
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from _logging import log as _log
from rs_platform.errors import SyncError, ValidationError
from rs_platform.models import User
from rs_platform.repository import Callback, UserRepository, callback_from, validate_user

__all__ = ["UserService", "Messages", "Notifier", "LogNotifier", "Outcome", "wait_for"]

LOG = _log.child("USERS")


class Messages:
    NO_IMAGE_SELECTED = "No image selected"
    IMAGE_UPDATED = "Image updated successfully"
    IMAGE_UPDATE_ERROR = "Error updating image: "
    NEW_USERS_ADDED = " new users added"
    ERROR = "ERROR : "
    NO_USERS_FOUND = "ERROR : No users found"
    USER_UPDATED = "User updated successfully"
    USER_DELETED = "User deleted successfully"
    USER_REFRESHED = "User refreshed successfully"
    USER_ADDED = "User added successfully"

    NO_LOCAL_USERS = "No users found in the local database."
    API_FETCH_FAILED = "Failed to fetch users from API."
    API_FETCH_PREFIX = "Error fetching users from API: "
    STORE_FAILED = "Failed to store users in local DB"


class Notifier(Protocol):
    def notify(self, message: str) -> None: ...


class LogNotifier:
    def __init__(self, logger: Any = None):
        self._log = logger or LOG

    def notify(self, message: str) -> None:
        text = str(message or "").strip()
        if text.startswith(Messages.ERROR.strip()):
            self._log.warn(text)
        else:
            self._log.info(text)


@dataclass
class Outcome:
    ok: bool = False
    value: Any = None
    error: str | None = None
    _event: threading.Event = field(default_factory=threading.Event, repr=False)

    def on_result(self, result: Any) -> None:
        self.ok, self.value = True, result
        self._event.set()

    def on_error(self, error_message: str) -> None:
        self.ok, self.error = False, error_message
        self._event.set()

    def wait(self, timeout: float | None = None) -> "Outcome":
        if not self._event.wait(timeout):
            self.ok, self.error = False, "Timed out waiting for the operation"
        return self


def wait_for(op: Callable[..., None], *args: Any, timeout: float | None = None) -> Outcome:
    """Run a callback-style operation and block until it reports back."""
    out = Outcome()
    op(*args, out)
    return out.wait(timeout)


class UserService:
    def __init__(self, repo: UserRepository, notifier: Notifier | None = None):
        self.repo = repo
        self.notifier: Notifier = notifier or LogNotifier()

    # API -> DB
    def fetch_from_api_store_in_db(self, page: int, callback: Callback[int]) -> None:
        LOG.debug(f"fetch_from_api_store_in_db page={page}")

        def _fetched(users: list[User] | None) -> None:
            if users is None:
                callback.on_error(Messages.API_FETCH_FAILED)
                return
            try:
                self.repo.insert_users_to_local_db(users, callback)
            except RuntimeError as e:
                # repository closed while the fetch was in flight
                LOG.error(f"insert after fetch of page {page} refused: {e}")
                callback.on_error(Messages.STORE_FAILED)

        def _failed(msg: str) -> None:
            callback.on_error(f"{Messages.API_FETCH_PREFIX}{msg}")

        self.repo.fetch_users_from_api(page, callback_from(_fetched, _failed))

    def fetch_from_db(self, callback: Callback[list[User]]) -> None:
        def _loaded(users: list[User] | None) -> None:
            if users:
                callback.on_result(users)
            else:
                callback.on_error(Messages.NO_LOCAL_USERS)

        self.repo.fetch_all_users_from_local_db(callback_from(_loaded, callback.on_error))

    def refresh_user(self, user_id: int, callback: Callback[User]) -> None:
        self.repo.fetch_user_by_id(user_id, callback)

    # Edits
    def add_user(self, user: User, callback: Callback[int]) -> None:
        user = user.normalized()
        try:
            validate_user(user)
        except ValidationError as e:
            callback.on_error(e.message)
            return
        self.repo.add_new_user(user, callback)

    def update_db(self, user: User, callback: Callback[int]) -> None:
        user = user.normalized()
        LOG.debug(f"update_db id={user.id} {user.first_name} {user.last_name} {user.email}")
        try:
            validate_user(user, for_update=True)
        except ValidationError as e:
            callback.on_error(e.message)
            return
        self.repo.update_user_in_db(user, callback)

    def delete_user(self, user: User, callback: Callback[int]) -> None:
        self.repo.delete_user_from_db(user, callback)

    def update_avatar(self, user_id: int, avatar: str, callback: Callback[int]) -> None:
        if not str(avatar or "").strip():
            callback.on_error(Messages.NO_IMAGE_SELECTED)
            return
        self.repo.update_user_avatar(user_id, avatar, callback)

    # Paging
    def sync_page(self, page: int, *, timeout: float | None = None) -> dict[str, Any]:
        out = wait_for(self.fetch_from_api_store_in_db, page, timeout=timeout)
        if out.ok:
            self.notifier.notify(f"{out.value}{Messages.NEW_USERS_ADDED}")
            return {"ok": True, "page": page, "added": int(out.value)}
        self.notifier.notify(f"{Messages.ERROR}{out.error}")
        return {"ok": False, "page": page, "added": 0, "error": out.error}

    def sync_all_pages(self, start_page: int = 1, max_pages: int | None = None) -> dict[str, Any]:
        """Walk pages from `start_page` until `total_pages`, reconciling each one."""
        page = max(1, int(start_page))
        summary: dict[str, Any] = {"ok": True, "pages": 0, "added": 0, "total": None, "error": None}
        while max_pages is None or summary["pages"] < max_pages:
            try:
                res = self.repo.fetch_page(page).result()
            except SyncError as e:
                LOG.error(f"sync stopped at page {page}: {e.message}")
                summary.update(ok=False, error=f"{Messages.API_FETCH_PREFIX}{e.message}", failed_page=page)
                break
            try:
                added = self.repo.insert_users(res.records).result()
            except SyncError as e:
                LOG.error(f"sync stopped at page {page}: {e.message}")
                summary.update(ok=False, error=Messages.STORE_FAILED, failed_page=page)
                break
            summary["pages"] += 1
            summary["added"] += int(added)
            summary["total"] = res.total
            LOG.info(f"page {res.page}/{res.total_pages}: {added} new of {len(res.records)}")
            if not res.has_next or not res.records:
                break
            page += 1
        self.notifier.notify(
            f"{summary['added']}{Messages.NEW_USERS_ADDED}" if summary["ok"] else f"{Messages.ERROR}{summary['error']}"
        )
        return summary
