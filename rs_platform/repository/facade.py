# rs_platform/repository/facade.py
# Repository facade: futures for the core, two-case callbacks for presentation code.
# Copyright (c) 2026 ReqresSync contributors
from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Generic, Protocol, TypeVar

from _logging import log as _root_log

from ..errors import ExhaustedRetries, NotFound, SyncError, ValidationError
from ..models import PageResult, User
from ..serial import SerialTaskRunner
from ..store import LocalStore
from ._allocator import next_available_id as _next_id
from ._fetch import DEFAULT_RETRY_DELAY, PageSource, fetch_page_result_with_retry
from ._reconcile import reconcile_and_insert

__all__ = ["UserRepository", "Callback", "callback_from", "SUCCESS"]

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)

SUCCESS = 0

MSG_INSERT = "Failed to store users in local DB"
MSG_READ_ALL = "Failed to fetch users from local DB"
MSG_UPDATE = "Error updating user"
MSG_DELETE = "Error : failed to delete user"
MSG_ADD = "Error : failed to add user"
MSG_NEXT_ID = "Unable to determine the next available ID"
MSG_AVATAR = "Error updating avatar"


class Callback(Protocol[T_contra]):
    def on_result(self, result: T_contra) -> None: ...
    def on_error(self, error_message: str) -> None: ...


@dataclass
class _FnCallback(Generic[T]):
    result_fn: Callable[[T], Any]
    error_fn: Callable[[str], Any]

    def on_result(self, result: T) -> None:
        self.result_fn(result)

    def on_error(self, error_message: str) -> None:
        self.error_fn(error_message)


def callback_from(on_result: Callable[[Any], Any], on_error: Callable[[str], Any]) -> Callback[Any]:
    return _FnCallback(on_result, on_error)


class _OnceCallback:
    """Delivers at most one outcome to the wrapped callback."""

    def __init__(self, inner: Callback[Any], log: Any):
        self._inner = inner
        self._log = log
        self._lock = threading.Lock()
        self._done = False

    def _claim(self) -> bool:
        with self._lock:
            if self._done:
                return False
            self._done = True
            return True

    def on_result(self, result: Any) -> None:
        if self._claim():
            self._inner.on_result(result)
        else:
            self._log.warn("dropped a second outcome for an already answered callback")

    def on_error(self, error_message: str) -> None:
        if self._claim():
            self._inner.on_error(error_message)
        else:
            self._log.warn(f"dropped a second outcome for an already answered callback: {error_message}")


@dataclass
class UserRepository:
    store: LocalStore
    source: PageSource
    max_retries: int = 3
    retry_delay: float = DEFAULT_RETRY_DELAY
    sleep: Callable[[float], Any] = time.sleep
    log: Any = None
    owns_store: bool = False  # close() only closes a store this repository opened

    serial: SerialTaskRunner = field(init=False)
    network: ThreadPoolExecutor = field(init=False)

    def __post_init__(self) -> None:
        self.max_retries = max(0, int(self.max_retries))
        self.retry_delay = max(0.0, float(self.retry_delay))
        self.log = self.log or _root_log.child("REPO")
        self._fetch_log = self.log.child("FETCH")
        self.serial = SerialTaskRunner("store")
        self.network = ThreadPoolExecutor(max_workers=2, thread_name_prefix="rs-net")

    @classmethod
    def from_config(
        cls,
        cfg: Mapping[str, Any],
        *,
        source: PageSource | None = None,
        store: LocalStore | None = None,
        ctx: Any = None,
    ) -> "UserRepository":
        """Build from the config; `ctx` receives `api:hit` events when `runtime.api_hits` is on."""
        from ..config_base import db_path
        from providers.sync._mod_REQRES import from_config as _source_from_config

        rq = dict(cfg.get("reqres") or {})
        return cls(
            store=store or LocalStore(db_path(cfg)),
            source=source or _source_from_config(cfg, ctx=ctx),
            max_retries=int(rq.get("max_retries", 3)),
            retry_delay=float(rq.get("retry_delay_ms", 2000)) / 1000.0,
            owns_store=store is None,
        )

    # ------------------------------------------------------------------
    # Futures
    # ------------------------------------------------------------------
    def fetch_page(self, page: int) -> "Future[PageResult]":
        return self.network.submit(
            fetch_page_result_with_retry,
            self.source,
            page,
            self.max_retries,
            delay=self.retry_delay,
            sleep=self.sleep,
            log=self._fetch_log,
        )

    def fetch_users(self, page: int) -> "Future[list[User]]":
        out: Future[list[User]] = Future()

        def _done(f: "Future[PageResult]") -> None:
            exc = f.exception()
            if exc is not None:
                out.set_exception(exc)
            else:
                out.set_result(list(f.result().records))

        self.fetch_page(page).add_done_callback(_done)
        return out

    def insert_users(self, records: Iterable[User]) -> "Future[int]":
        batch = list(records)
        self.log.debug(f"insert_users batch={len(batch)}")
        return self.serial.submit(reconcile_and_insert, self.store, batch, log=self.log)

    def all_users(self) -> "Future[list[User]]":
        return self.serial.submit(self.store.all)

    def get_user(self, user_id: int) -> "Future[User]":
        def _task() -> User:
            u = self.store.get(user_id)
            if u is None:
                raise NotFound(user_id)
            return u
        return self.serial.submit(_task)

    def update_user(self, user: User) -> "Future[int]":
        self.log.debug(f"update_user id={user.id}")
        return self.serial.submit(
            self.store.update, user.id, user.first_name, user.last_name, user.email, user.avatar
        )

    def delete_user(self, user: User) -> "Future[int]":
        self.log.debug(f"delete_user id={user.id}")
        return self.serial.submit(self.store.delete, user.id)

    def insert_user(self, user: User) -> "Future[None]":
        return self.serial.submit(self.store.upsert, user)

    def add_user(self, user: User) -> "Future[User]":
        """Allocate the next free id and store `user` under it, as one queued task."""
        def _task() -> User:
            new_id = _next_id(self.store)
            stored = user.with_id(new_id)
            self.store.upsert(stored)
            self.log.info(f"user added id={new_id}")
            return stored
        return self.serial.submit(_task)

    def update_avatar(self, user_id: int, avatar: str) -> "Future[int]":
        return self.serial.submit(self.store.update_avatar, user_id, avatar)

    def next_available_id(self) -> "Future[int]":
        return self.serial.submit(_next_id, self.store)

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------
    def _deliver(
        self,
        fut: "Future[Any]",
        callback: Callback[Any],
        *,
        error_message: str | Callable[[BaseException], str],
        result: Callable[[Any], Any] | None = None,
        what: str,
    ) -> None:
        once = _OnceCallback(callback, self.log)

        def _message(exc: BaseException) -> str:
            if isinstance(exc, (ExhaustedRetries, NotFound, ValidationError)):
                return exc.message
            return error_message(exc) if callable(error_message) else error_message

        def _done(f: "Future[Any]") -> None:
            exc = f.exception()
            if exc is not None:
                if isinstance(exc, SyncError):
                    self.log.error(f"{what} failed: {exc.message}")
                else:
                    self.log.error(f"{what} failed unexpectedly: {exc!r}")
                once.on_error(_message(exc))
                return
            value = f.result()
            once.on_result(result(value) if result is not None else value)

        fut.add_done_callback(_done)

    def fetch_users_from_api(self, page: int, callback: Callback[list[User]]) -> None:
        self._deliver(self.fetch_users(page), callback, error_message="API call failed.", what="fetch_users_from_api")

    def insert_users_to_local_db(self, users: Iterable[User], callback: Callback[int]) -> None:
        self._deliver(self.insert_users(users), callback, error_message=MSG_INSERT, what="insert_users_to_local_db")

    def fetch_all_users_from_local_db(self, callback: Callback[list[User]]) -> None:
        self._deliver(self.all_users(), callback, error_message=MSG_READ_ALL, what="fetch_all_users_from_local_db")

    def update_user_in_db(self, user: User, callback: Callback[int]) -> None:
        self._deliver(self.update_user(user), callback, error_message=MSG_UPDATE,
                      result=lambda _: SUCCESS, what="update_user_in_db")

    def delete_user_from_db(self, user: User, callback: Callback[int]) -> None:
        self._deliver(self.delete_user(user), callback, error_message=MSG_DELETE,
                      result=lambda _: SUCCESS, what="delete_user_from_db")

    def add_user_to_db(self, user: User, callback: Callback[int]) -> None:
        self._deliver(self.insert_user(user), callback, error_message=MSG_ADD,
                      result=lambda _: SUCCESS, what="add_user_to_db")

    def add_new_user(self, user: User, callback: Callback[int]) -> None:
        self._deliver(self.add_user(user), callback, error_message=MSG_ADD,
                      result=lambda _: SUCCESS, what="add_new_user")

    def update_user_avatar(self, user_id: int, avatar: str, callback: Callback[int]) -> None:
        self._deliver(self.update_avatar(user_id, avatar), callback, error_message=MSG_AVATAR,
                      result=lambda _: SUCCESS, what="update_user_avatar")

    def fetch_user_by_id(self, user_id: int, callback: Callback[User]) -> None:
        self._deliver(self.get_user(user_id), callback,
                      error_message=f"Error fetching user by ID: {user_id}", what="fetch_user_by_id")

    def get_next_available_id(self, callback: Callback[int]) -> None:
        self._deliver(self.next_available_id(), callback, error_message=MSG_NEXT_ID, what="get_next_available_id")

    # ------------------------------------------------------------------
    def close(self) -> None:
        self.network.shutdown(wait=True)
        if not self.serial.closed:
            if self.owns_store:
                self.serial.submit(self.store.close)
            self.serial.shutdown(wait=True)
        close_source = getattr(self.source, "close", None)
        if callable(close_source):
            close_source()
