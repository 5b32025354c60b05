# ReqresSync test scripts
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from rs_platform.models import PageResult, User  # noqa: E402
from rs_platform.repository import UserRepository  # noqa: E402
from rs_platform.store import LocalStore  # noqa: E402


def make_user(uid: int, first: str = "Janet", last: str = "Weaver", email: str | None = None) -> User:
    return User(
        id=uid,
        email=email or f"user{uid}@reqres.in",
        first_name=first,
        last_name=last,
        avatar=f"https://reqres.in/img/faces/{uid}-image.jpg",
    )


def make_page(ids: list[int], *, page: int = 1, total_pages: int = 1, per_page: int = 6) -> PageResult:
    return PageResult(
        records=[make_user(i) for i in ids],
        page=page,
        per_page=per_page,
        total=per_page * total_pages,
        total_pages=total_pages,
    )


@dataclass
class FakeSource:
    """Scripted remote source: each call pops the next outcome (exception or page)."""

    script: list[Any] = field(default_factory=list)
    calls: list[int] = field(default_factory=list)
    fallback: Any = None

    def get_users(self, page: int) -> PageResult:
        self.calls.append(page)
        outcome = self.script.pop(0) if self.script else self.fallback
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome is None:
            raise AssertionError("FakeSource ran out of scripted outcomes")
        return outcome


@dataclass
class SleepRecorder:
    delays: list[float] = field(default_factory=list)

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture()
def config_base(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("CONFIG_BASE", str(tmp_path))
    return tmp_path


@pytest.fixture()
def store(tmp_path: Path) -> Iterator[LocalStore]:
    s = LocalStore(tmp_path / "user-database.sqlite")
    yield s
    s.close()


@pytest.fixture()
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture()
def repo(store: LocalStore, source: FakeSource) -> Iterator[UserRepository]:
    r = UserRepository(store=store, source=source, max_retries=2, retry_delay=0.0)
    yield r
    r.close()
