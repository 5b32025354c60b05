# /providers/sync/_mod_common.py
# ReqresSync common remote-source helpers
# Copyright (c) 2026 ReqresSync contributors
from __future__ import annotations

import json
import os
from typing import Any, Callable, Mapping
from urllib.parse import urlparse

import requests

__VERSION__ = "0.2.0"
__all__ = [
    "HitSession",
    "make_emitter",
    "build_session",
    "safe_json",
    "status_ok",
    "label_reqres",
]

EmitFn = Callable[[str, Mapping[str, Any]], None]
FeatureLabelFn = Callable[[str, str, Mapping[str, Any]], str]


def make_emitter(ctx: Any) -> EmitFn:
    emit_fn: Callable[..., Any] | None = None
    if ctx is not None:
        if callable(getattr(ctx, "emit", None)):
            emit_fn = getattr(ctx, "emit")
        elif callable(ctx):
            emit_fn = ctx

    def _emit(event: str, payload: Mapping[str, Any]) -> None:
        if not emit_fn:
            return
        try:
            try:
                emit_fn(event, **dict(payload))
            except TypeError:
                emit_fn(event, dict(payload))
        except Exception:
            pass

    return _emit


def default_feature_label(provider: str, method: str, url: str, kw: Mapping[str, Any]) -> str:
    segs = [s for s in (urlparse(url).path or "/").split("/") if s]
    head = "/".join(segs[:3]) or "unknown"
    return head.lower()


def label_reqres(method: str, url: str, kw: Mapping[str, Any]) -> str:
    segs = [s for s in (urlparse(url).path or "/").split("/") if s]
    if segs[:2] == ["api", "users"]:
        if len(segs) == 2:
            return "users:index" if method.upper() == "GET" else "users:write"
        return "users:item"
    return default_feature_label("REQRES", method, url, kw)


class HitSession(requests.Session):
    def __init__(
        self,
        provider: str,
        emit: EmitFn,
        feature_label: FeatureLabelFn | None = None,
        emit_hits: bool | None = None,
    ):
        super().__init__()
        self._provider = provider
        self._emit = emit
        self._label = feature_label or (lambda m, u, kw: default_feature_label(provider, m, u, kw))
        self._emit_hits = bool(os.getenv("RS_API_HITS")) if emit_hits is None else bool(emit_hits)

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:  # type: ignore[override]
        try:
            return super().request(method, url, **kwargs)
        finally:
            if self._emit_hits:
                try:
                    feature = self._label(method.upper(), url, kwargs)
                except Exception:
                    feature = "unknown"
                self._emit("api:hit", {"provider": self._provider, "feature": feature})


def build_session(
    provider: str,
    ctx: Any,
    *,
    feature_label: FeatureLabelFn | None = None,
    emit_hits: bool | None = None,
) -> HitSession:
    return HitSession(provider, make_emitter(ctx), feature_label, emit_hits)


def status_ok(resp: requests.Response) -> bool:
    return 200 <= int(resp.status_code) < 300


def safe_json(resp: requests.Response) -> Any:
    """Decoded body, or None when the body is empty or not JSON."""
    text = resp.text or ""
    if not text.strip():
        return None
    try:
        ctype = (resp.headers.get("Content-Type") or "").lower()
        if "json" in ctype:
            return resp.json()
        return json.loads(text)
    except ValueError:
        return None
