# rs_platform/config_base.py
from __future__ import annotations

import copy
import json
import os
import secrets
import threading
import time
from pathlib import Path
from typing import Any, Dict, Mapping

# ------------------------------------------------------------
# Base dir resolution
# ------------------------------------------------------------
def CONFIG_BASE() -> Path:
    """
    Determine the base directory for config and the local database.

    Priority:
      1) $CONFIG_BASE if set
      2) /config (when running in a container that mounts /config)
      3) Project root (one level up from this package)
    """
    env = os.getenv("CONFIG_BASE")
    if env:
        return Path(env)

    if Path("/app").exists():
        return Path("/config")

    return Path(__file__).resolve().parents[1]


# Default config structure
DEFAULT_CFG: Dict[str, Any] = {
    # --- Remote source -------------------------------------------------------
    "reqres": {
        "base_url": "https://reqres.in",                # Scheme + host, no trailing /api
        "api_key": "",                                  # Optional; sent as x-api-key when set
        "timeout": 10.0,                                # Per-attempt HTTP timeout (seconds)
        "max_retries": 3,                               # Retries after the first attempt (0 = single attempt)
        "retry_delay_ms": 2000,                         # Constant delay between attempts
    },

    # --- Local cache ---------------------------------------------------------
    "storage": {
        "db_name": "user-database.sqlite",              # SQLite file under the config dir
    },

    # --- Runtime -------------------------------------------------------------
    "runtime": {
        "debug": False,                                 # Enables DEBUG lines in the logger
        "debug_http": False,                            # uvicorn access log
        "api_hits": False,                              # Emit an api:hit event per remote request
    },

    # --- HTTP surface --------------------------------------------------------
    "server": {
        "host": "0.0.0.0",
        "port": 8788,
    },
}


# ------------------------------------------------------------
# Helpers: paths, IO, merging, normalization
# ------------------------------------------------------------
def _cfg_file() -> Path:
    return CONFIG_BASE() / "config.json"


def config_path() -> Path:
    return _cfg_file()


def db_path(cfg: Mapping[str, Any] | None = None) -> Path:
    st = dict((cfg or {}).get("storage") or {})
    name = str(st.get("db_name") or DEFAULT_CFG["storage"]["db_name"]).strip()
    p = Path(name)
    return p if p.is_absolute() else CONFIG_BASE() / p


def _read_json(p: Path) -> Dict[str, Any]:
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def _write_json_atomic(p: Path, data: Dict[str, Any]) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    suffix = f".{time.time_ns()}.{os.getpid()}.{threading.get_ident()}.{secrets.token_hex(4)}.tmp"
    tmp = p.with_suffix(suffix)

    with tmp.open("w", encoding="utf-8", newline="\n") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")
    tmp.replace(p)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)  # type: ignore[assignment]
        else:
            out[k] = v
    return out


def _as_int(v: Any, default: int) -> int:
    try:
        return int(v)
    except Exception:
        return default


def _as_float(v: Any, default: float) -> float:
    try:
        return float(v)
    except Exception:
        return default


def _normalize_reqres(val: Dict[str, Any]) -> Dict[str, Any]:
    v = dict(val or {})
    d = DEFAULT_CFG["reqres"]
    v["base_url"] = str(v.get("base_url") or d["base_url"]).strip().rstrip("/")
    v["api_key"] = str(v.get("api_key") or "").strip()
    v["timeout"] = max(0.1, _as_float(v.get("timeout"), d["timeout"]))
    v["max_retries"] = max(0, _as_int(v.get("max_retries"), d["max_retries"]))
    v["retry_delay_ms"] = max(0, _as_int(v.get("retry_delay_ms"), d["retry_delay_ms"]))
    return v


# ------------------------------------------------------------
# Public API
# ------------------------------------------------------------
def load_config() -> Dict[str, Any]:
    """
    Read config.json merged over the defaults.
    """
    p = _cfg_file()
    user_cfg: Dict[str, Any] = {}
    if p.exists():
        try:
            user_cfg = _read_json(p)
        except Exception:
            user_cfg = {}

    cfg = _deep_merge(DEFAULT_CFG, user_cfg)
    cfg["reqres"] = _normalize_reqres(cfg.get("reqres") or {})
    return cfg


def save_config(cfg: Dict[str, Any]) -> None:
    """
    Write to config.json
    """
    data = dict(cfg or {})
    if isinstance(data.get("reqres"), dict):
        data["reqres"] = _normalize_reqres(data["reqres"])
    _write_json_atomic(_cfg_file(), data)

    from _logging import reset_debug_cache
    reset_debug_cache()
