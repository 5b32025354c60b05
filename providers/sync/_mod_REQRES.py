# /providers/sync/_mod_REQRES.py
# ReqresSync remote source: one page of users per request, no retries here.
# Copyright (c) 2026 ReqresSync contributors
from __future__ import annotations

__VERSION__ = "1.0.0"
__all__ = ["ReqresSource", "from_config", "log_hit", "USERS_PATH", "UA"]

from typing import Any, Mapping

import requests

from rs_platform.errors import TransportError, UnsuccessfulResponse
from rs_platform.models import PageResult

from ._mod_common import build_session, label_reqres, safe_json, status_ok

try:
    from _logging import log as host_log
except Exception:  # pragma: no cover
    host_log = None  # type: ignore[assignment]

UA = "ReqresSync/UsersModule"
USERS_PATH = "/api/users"


class ReqresSource:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        api_key: str = "",
        session: requests.Session | None = None,
        ctx: Any = None,
        emit_hits: bool | None = None,
    ):
        self.base_url = str(base_url or "").rstrip("/")
        self.timeout = float(timeout)
        self.api_key = str(api_key or "")
        self.session = session or build_session("REQRES", ctx, feature_label=label_reqres, emit_hits=emit_hits)
        self.session.headers.update({"User-Agent": UA, "Accept": "application/json"})
        if self.api_key:
            self.session.headers["x-api-key"] = self.api_key
        self._log = host_log.child("REQRES") if host_log is not None else None

    @property
    def users_url(self) -> str:
        return f"{self.base_url}{USERS_PATH}"

    def get_users(self, page: int) -> PageResult:
        """Fetch one page; raises TransportError or UnsuccessfulResponse."""
        try:
            resp = self.session.get(self.users_url, params={"page": int(page)}, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"GET {self.users_url} page={page} failed: {e}") from e

        if not status_ok(resp):
            raise UnsuccessfulResponse(
                f"GET {self.users_url} page={page} returned HTTP {resp.status_code}",
                status=int(resp.status_code),
            )

        body = safe_json(resp)
        if body is None:
            raise UnsuccessfulResponse(
                f"GET {self.users_url} page={page} returned an empty body",
                status=int(resp.status_code),
            )
        result = PageResult.from_payload(body, page=page)
        if self._log is not None:
            self._log.debug(
                f"page {result.page}/{result.total_pages} -> {len(result.records)} users (total={result.total})"
            )
        return result

    def close(self) -> None:
        self.session.close()


def log_hit(event: str, **payload: Any) -> None:
    """Default `api:hit` sink: one debug line per request on the REQRES logger."""
    if host_log is None:
        return
    host_log.child("REQRES").debug(
        f"{event} {payload.get('provider', '?')} {payload.get('feature', '?')}", extra=dict(payload)
    )


def from_config(cfg: Mapping[str, Any], *, ctx: Any = None) -> ReqresSource:
    rq = dict(cfg.get("reqres") or {})
    rt = dict(cfg.get("runtime") or {})
    hits = bool(rt.get("api_hits"))
    return ReqresSource(
        rq.get("base_url") or "https://reqres.in",
        timeout=float(rq.get("timeout") or 10.0),
        api_key=str(rq.get("api_key") or ""),
        ctx=ctx if ctx is not None else (log_hit if hits else None),
        emit_hits=hits or None,
    )
