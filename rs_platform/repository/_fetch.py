# rs_platform/repository/_fetch.py
# Page fetch with a bounded, constant-delay retry policy.
# Copyright (c) 2026 ReqresSync contributors
from __future__ import annotations

import time
from typing import Any, Callable, Protocol

from ..errors import RETRYABLE, ExhaustedRetries, SyncError
from ..models import PageResult, RetryState, User

DEFAULT_RETRY_DELAY = 2.0


class PageSource(Protocol):
    def get_users(self, page: int) -> PageResult: ...


#--- Retry loop ---------------------------------------------------------------
def fetch_page_result_with_retry(
    source: PageSource,
    page: int,
    max_retries: int,
    *,
    delay: float = DEFAULT_RETRY_DELAY,
    sleep: Callable[[float], Any] = time.sleep,
    log: Any = None,
) -> PageResult:
    """Fetch `page`, retrying up to `max_retries` times on retryable failures.

    Makes at most `max_retries + 1` attempts and sleeps `delay` seconds between
    them. Raises ExhaustedRetries once the budget is spent; any other error
    propagates on the first occurrence.
    """
    max_retries = max(0, int(max_retries))
    st = RetryState(page=int(page), remaining_retries=max_retries)

    while True:
        st.attempts += 1
        if log is not None:
            log.debug(f"Attempt {st.attempts} to fetch users (page {st.page})")
        try:
            result = source.get_users(st.page)
        except RETRYABLE as e:
            st.last_error = e
            if st.remaining_retries <= 0:
                if log is not None:
                    log.error(f"page {st.page}: giving up after {st.attempts} attempts: {e}")
                raise ExhaustedRetries(e, st.attempts) from e
            st.remaining_retries -= 1
            if log is not None:
                log.retry(f"page {st.page}: {e}. Retrying in {delay:g} seconds...")
            if delay > 0:
                sleep(delay)
            continue
        if log is not None and st.attempts > 1:
            log.info(f"page {st.page}: fetched on attempt {st.attempts}")
        return result


def fetch_page_with_retry(
    source: PageSource,
    page: int,
    max_retries: int,
    *,
    delay: float = DEFAULT_RETRY_DELAY,
    sleep: Callable[[float], Any] = time.sleep,
    log: Any = None,
) -> list[User]:
    res = fetch_page_result_with_retry(source, page, max_retries, delay=delay, sleep=sleep, log=log)
    return list(res.records)


__all__ = [
    "PageSource",
    "DEFAULT_RETRY_DELAY",
    "fetch_page_with_retry",
    "fetch_page_result_with_retry",
    "SyncError",
]
