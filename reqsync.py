# /reqsync.py
# ReqresSync - paged user sync with a local SQLite cache
# Copyright (c) 2026 ReqresSync contributors
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Mapping

import socket
import sys
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from _logging import log as _log
from api import register as register_api
from rs_platform.config_base import CONFIG_BASE, config_path, db_path, load_config
from rs_platform.repository import UserRepository
from services.users import LogNotifier, Notifier, UserService

__VERSION__ = "1.0.0"
LOG = _log.child("APP")


def create_app(
    cfg: Mapping[str, Any] | None = None,
    *,
    repo: UserRepository | None = None,
    notifier: Notifier | None = None,
    hits: Any = None,
) -> FastAPI:
    """Build the app; the repository is opened on startup unless one is passed in.

    `hits` receives `api:hit` events from the remote session when `runtime.api_hits`
    is on; without it they go to the REQRES logger.
    """

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        conf = dict(cfg) if cfg is not None else load_config()
        r = repo or UserRepository.from_config(conf, ctx=hits)
        app.state.repo = r
        app.state.users = UserService(r, notifier or LogNotifier())
        LOG.info(f"local cache: {r.store.path}")
        try:
            yield
        finally:
            try:
                r.close()
                LOG.info("repository closed")
            except Exception as e:
                LOG.error(f"repository close failed: {e}")
            app.state.users = None
            app.state.repo = None

    app = FastAPI(title="ReqresSync", version=__VERSION__, lifespan=_lifespan)
    register_api(app)

    @app.middleware("http")
    async def cache_headers_for_api(request: Request, call_next):
        resp = await call_next(request)
        if request.url.path.startswith("/api/"):
            resp.headers["Cache-Control"] = "no-store"
            resp.headers["Pragma"] = "no-cache"
            resp.headers["Expires"] = "0"
        return resp

    @app.get("/api/health")
    def api_health(request: Request) -> dict[str, Any]:
        r = getattr(request.app.state, "repo", None)
        return {
            "ok": r is not None,
            "version": __VERSION__,
            "store": r.store.info() if r is not None else None,
        }

    return app


def get_primary_ip() -> str:
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        s.connect(("8.8.8.8", 80)); return s.getsockname()[0]
    except OSError:
        return "127.0.0.1"
    finally:
        s.close()


# Entry point
def main(host: str | None = None, port: int | None = None) -> None:
    cfg = load_config()
    srv = dict(cfg.get("server") or {})
    host = host or str(srv.get("host") or "0.0.0.0")
    port = int(port or srv.get("port") or 8788)
    rt = dict(cfg.get("runtime") or {})
    debug = bool(rt.get("debug"))

    print("\nReqresSync running:")
    print(f"  Local:   http://127.0.0.1:{port}")
    print(f"  LAN:     http://{get_primary_ip()}:{port}")
    print(f"  Bind:    {host}:{port}")
    print(f"  Config:  {config_path()} (JSON)")
    print(f"  Cache:   {db_path(cfg)}")
    print(f"  Remote:  {cfg['reqres']['base_url']}\n")
    LOG.debug(f"config base {CONFIG_BASE()}")

    uvicorn.run(
        create_app(cfg),
        host=host,
        port=port,
        log_level=("debug" if debug else "warning"),
        access_log=bool(rt.get("debug_http")),
    )


if __name__ == "__main__":
    main()
