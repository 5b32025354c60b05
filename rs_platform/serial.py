# rs_platform/serial.py
# Single-worker task queue guarding the local store.
# Copyright (c) 2026 ReqresSync contributors
from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, TypeVar

T = TypeVar("T")


class SerialTaskRunner:
    """Runs submitted callables one at a time, in submission order."""

    def __init__(self, name: str = "store"):
        self.name = name
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"rs-{name}")
        self._worker_ident: int | None = None
        self._closed = False
        self._lock = threading.Lock()

    def _wrap(self, fn: Callable[..., T], args: tuple[Any, ...], kwargs: dict[str, Any]) -> Callable[[], T]:
        def _task() -> T:
            self._worker_ident = threading.get_ident()
            return fn(*args, **kwargs)
        return _task

    def submit(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> "Future[T]":
        with self._lock:
            if self._closed:
                raise RuntimeError(f"serial runner '{self.name}' is shut down")
            return self._pool.submit(self._wrap(fn, args, kwargs))

    def run(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        # A task that waits on its own queue would never finish.
        if self.in_worker():
            return fn(*args, **kwargs)
        return self.submit(fn, *args, **kwargs).result()

    def in_worker(self) -> bool:
        return self._worker_ident is not None and threading.get_ident() == self._worker_ident

    @property
    def closed(self) -> bool:
        return self._closed

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> "SerialTaskRunner":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.shutdown(wait=True)


__all__ = ["SerialTaskRunner"]
