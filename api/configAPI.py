# api/configAPI.py
# ReqresSync - read and update config.json
# Copyright (c) 2026 ReqresSync contributors
from __future__ import annotations

import copy
from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from _logging import log as _log
from rs_platform import config_base
from rs_platform.config_base import load_config, save_config

router = APIRouter(prefix="/api", tags=["config"])

LOG = _log.child("CONFIG")
MASK = "••••••••"
SECRETS = [("reqres", "api_key")]


def _blank(v: Any) -> bool:
    s = ("" if v is None else str(v)).strip()
    return s in {"", MASK}


def _redact(cfg: dict[str, Any]) -> dict[str, Any]:
    out = copy.deepcopy(cfg)
    for section, leaf in SECRETS:
        blk = out.get(section)
        if isinstance(blk, dict) and str(blk.get(leaf) or "").strip():
            blk[leaf] = MASK
    return out


@router.get("/config")
def api_config() -> JSONResponse:
    return JSONResponse(_redact(load_config()))


@router.post("/config")
def api_config_save(payload: dict[str, Any] = Body(...)) -> dict[str, Any]:
    incoming = dict(payload or {})
    current = load_config()
    merged = config_base._deep_merge(current, incoming)

    # A masked or empty secret means "keep what is stored".
    for section, leaf in SECRETS:
        inc = incoming.get(section)
        if isinstance(inc, dict) and leaf in inc and _blank(inc[leaf]):
            merged.setdefault(section, {})[leaf] = (current.get(section) or {}).get(leaf, "")

    save_config(merged)
    LOG.info("config saved")
    restart = any(k in incoming for k in ("reqres", "storage", "server"))
    return {"ok": True, "restart_required": restart}
