# ReqresSync test scripts
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
import responses

from rs_platform.config_base import load_config
from rs_platform.errors import PersistenceError, TransportError
from rs_platform.models import User
from rs_platform.repository import UserRepository
from rs_platform.store import LocalStore

from conftest import FakeSource, SleepRecorder, make_page, make_user


@dataclass
class Recorder:
    results: list[Any] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    done: threading.Event = field(default_factory=threading.Event)

    def on_result(self, result: Any) -> None:
        self.results.append(result)
        self.done.set()

    def on_error(self, error_message: str) -> None:
        self.errors.append(error_message)
        self.done.set()

    def wait(self) -> "Recorder":
        assert self.done.wait(5), "callback never fired"
        return self


def test_fetch_then_insert_through_callbacks(repo: UserRepository, source: FakeSource) -> None:
    source.script = [TransportError("reset"), make_page([1, 2, 3])]

    fetched = Recorder()
    repo.fetch_users_from_api(1, fetched)
    fetched.wait()
    assert fetched.errors == []
    users = fetched.results[0]
    assert [u.id for u in users] == [1, 2, 3]
    assert len(source.calls) == 2

    inserted = Recorder()
    repo.insert_users_to_local_db(users, inserted)
    assert inserted.wait().results == [3]

    again = Recorder()
    repo.insert_users_to_local_db(users, again)
    assert again.wait().results == [0]


def test_exhausted_fetch_reports_message_once(repo: UserRepository, source: FakeSource) -> None:
    source.fallback = TransportError("refused")
    cb = Recorder()
    repo.fetch_users_from_api(1, cb)
    cb.wait()
    assert cb.results == []
    assert cb.errors == ["Network error after 3 attempts."]
    assert len(source.calls) == 3


def test_retry_delay_is_constant(store: LocalStore) -> None:
    src = FakeSource(script=[TransportError("x"), TransportError("y"), make_page([1])])
    sleep = SleepRecorder()
    r = UserRepository(store=store, source=src, max_retries=3, retry_delay=2.0, sleep=sleep)
    try:
        assert [u.id for u in r.fetch_users(1).result(timeout=5)] == [1]
    finally:
        r.close()
    assert sleep.delays == [2.0, 2.0]


def test_fetch_user_by_id_not_found_is_an_error(repo: UserRepository) -> None:
    cb = Recorder()
    repo.fetch_user_by_id(12, cb)
    assert cb.wait().errors == ["User not found with ID: 12"]


def test_crud_callbacks_deliver_success_indicator(repo: UserRepository, store: LocalStore) -> None:
    cb = Recorder()
    repo.add_user_to_db(make_user(4, first="Eve"), cb)
    assert cb.wait().results == [0]

    cb = Recorder()
    repo.update_user_in_db(User(id=4, email="eve@x.io", first_name="Eve", last_name="Holt", avatar=""), cb)
    assert cb.wait().results == [0]

    cb = Recorder()
    repo.update_user_avatar(4, "file:///tmp/eve.png", cb)
    assert cb.wait().results == [0]

    cb = Recorder()
    repo.fetch_user_by_id(4, cb)
    got = cb.wait().results[0]
    assert (got.last_name, got.email, got.avatar) == ("Holt", "eve@x.io", "file:///tmp/eve.png")

    cb = Recorder()
    repo.delete_user_from_db(got, cb)
    assert cb.wait().results == [0]

    cb = Recorder()
    repo.fetch_all_users_from_local_db(cb)
    assert cb.wait().results == [[]]


def test_next_available_id_callback(repo: UserRepository, store: LocalStore) -> None:
    for uid in (0, 1, 3):
        store.upsert(make_user(uid))
    cb = Recorder()
    repo.get_next_available_id(cb)
    assert cb.wait().results == [2]


def test_persistence_failure_uses_static_message(repo: UserRepository, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken(*_a: Any, **_k: Any) -> None:
        raise PersistenceError("get: database is locked")

    monkeypatch.setattr(repo.store, "get", broken)
    cb = Recorder()
    repo.insert_users_to_local_db([make_user(1)], cb)
    assert cb.wait().errors == ["Failed to store users in local DB"]

    cb = Recorder()
    repo.fetch_user_by_id(9, cb)
    assert cb.wait().errors == ["Error fetching user by ID: 9"]


def test_concurrent_adds_get_distinct_ids(repo: UserRepository, store: LocalStore) -> None:
    store.upsert(make_user(0))
    store.upsert(make_user(2))
    barrier = threading.Barrier(8)
    futures: list[Any] = []
    lock = threading.Lock()

    def worker(n: int) -> None:
        barrier.wait()
        fut = repo.add_user(User(id=-1, email=f"n{n}@x.io", first_name="Ann", last_name="Lee"))
        with lock:
            futures.append(fut)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    stored = [f.result(timeout=5) for f in futures]
    ids = sorted(u.id for u in stored)
    assert ids == [1, 3, 4, 5, 6, 7, 8, 9]
    assert store.count() == 10


def test_callback_is_answered_exactly_once(repo: UserRepository) -> None:
    calls: list[str] = []
    done = threading.Event()

    class Noisy:
        def on_result(self, result: Any) -> None:
            calls.append("result")
            done.set()

        def on_error(self, error_message: str) -> None:
            calls.append("error")
            done.set()

    repo.get_next_available_id(Noisy())
    assert done.wait(5)
    repo.serial.run(lambda: None)
    assert calls == ["result"]


def test_close_only_closes_a_store_it_opened(config_base: Path, source: FakeSource) -> None:
    r = UserRepository.from_config(load_config(), source=source)
    owned = r.store
    assert owned.path == config_base / "user-database.sqlite"
    r.close()
    assert owned.info()["open"] is False


@responses.activate
def test_api_hits_reach_the_configured_sink(config_base: Path) -> None:
    responses.add(
        responses.GET,
        "https://reqres.test/api/users",
        json={"page": 1, "per_page": 1, "total": 1, "total_pages": 1,
              "data": [{"id": 4, "email": "e@reqres.in", "first_name": "Eve", "last_name": "Holt", "avatar": ""}]},
    )
    cfg = load_config()
    cfg["reqres"]["base_url"] = "https://reqres.test"
    cfg["runtime"]["api_hits"] = True
    events: list[tuple[str, dict[str, Any]]] = []

    def hits(event: str, **payload: Any) -> None:
        events.append((event, payload))

    r = UserRepository.from_config(cfg, ctx=hits)
    try:
        assert [u.id for u in r.fetch_users(1).result(timeout=5)] == [4]
    finally:
        r.close()

    assert events == [("api:hit", {"provider": "REQRES", "feature": "users:index"})]
