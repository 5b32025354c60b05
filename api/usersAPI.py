# /api/usersAPI.py
# ReqresSync - HTTP surface over the local user cache
# Copyright (c) 2026 ReqresSync contributors
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Path as FPath, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from rs_platform.models import User
from services.users import Messages, UserService, wait_for

router = APIRouter(prefix="/api/users", tags=["users"])

OP_TIMEOUT = 60.0


class UserIn(BaseModel):
    email: str
    first_name: str
    last_name: str
    avatar: str = ""


class AvatarIn(BaseModel):
    avatar: str


def _service(request: Request) -> UserService:
    return request.app.state.users


def _err(message: str | None, status_code: int) -> JSONResponse:
    return JSONResponse({"ok": False, "error": message or Messages.ERROR.strip()}, status_code=status_code)


def _is_validation(message: str | None) -> bool:
    return str(message or "").startswith("ERROR : Name") or "Invalid email format" in str(message or "")


@router.get("")
def api_users_list(request: Request) -> Any:
    out = wait_for(_service(request).fetch_from_db, timeout=OP_TIMEOUT)
    if not out.ok:
        code = 404 if out.error == Messages.NO_LOCAL_USERS else 500
        return _err(out.error, code)
    users = sorted(out.value, key=lambda u: u.id)
    return {"ok": True, "count": len(users), "data": [u.to_dict() for u in users]}


@router.get("/next-id")
def api_users_next_id(request: Request) -> Any:
    out = wait_for(_service(request).repo.get_next_available_id, timeout=OP_TIMEOUT)
    if not out.ok:
        return _err(out.error, 500)
    return {"ok": True, "next_id": int(out.value)}


@router.get("/{user_id}")
def api_users_get(request: Request, user_id: int = FPath(..., ge=0)) -> Any:
    out = wait_for(_service(request).refresh_user, user_id, timeout=OP_TIMEOUT)
    if not out.ok:
        code = 404 if str(out.error).startswith("User not found") else 500
        return _err(out.error, code)
    return {"ok": True, "data": out.value.to_dict()}


@router.post("")
def api_users_add(request: Request, payload: UserIn = Body(...)) -> Any:
    svc = _service(request)
    user = User(id=0, **payload.model_dump())
    out = wait_for(svc.add_user, user, timeout=OP_TIMEOUT)
    if not out.ok:
        return _err(out.error, 422 if _is_validation(out.error) else 500)
    svc.notifier.notify(Messages.USER_ADDED)
    return {"ok": True}


@router.put("/{user_id}")
def api_users_update(request: Request, user_id: int = FPath(..., ge=0), payload: UserIn = Body(...)) -> Any:
    svc = _service(request)
    user = User(id=user_id, **payload.model_dump())
    out = wait_for(svc.update_db, user, timeout=OP_TIMEOUT)
    if not out.ok:
        return _err(out.error, 422 if _is_validation(out.error) else 500)
    svc.notifier.notify(Messages.USER_UPDATED)
    return {"ok": True}


@router.patch("/{user_id}/avatar")
def api_users_avatar(request: Request, user_id: int = FPath(..., ge=0), payload: AvatarIn = Body(...)) -> Any:
    svc = _service(request)
    out = wait_for(svc.update_avatar, user_id, payload.avatar, timeout=OP_TIMEOUT)
    if not out.ok:
        code = 400 if out.error == Messages.NO_IMAGE_SELECTED else 500
        svc.notifier.notify(f"{Messages.IMAGE_UPDATE_ERROR}{out.error}")
        return _err(out.error, code)
    svc.notifier.notify(Messages.IMAGE_UPDATED)
    return {"ok": True}


@router.delete("/{user_id}")
def api_users_delete(request: Request, user_id: int = FPath(..., ge=0)) -> Any:
    svc = _service(request)
    out = wait_for(svc.delete_user, User(id=user_id), timeout=OP_TIMEOUT)
    if not out.ok:
        return _err(out.error, 500)
    svc.notifier.notify(Messages.USER_DELETED)
    return {"ok": True}


@router.post("/sync")
def api_users_sync(request: Request, page: int = Query(1, ge=1)) -> Any:
    res = _service(request).sync_page(page, timeout=OP_TIMEOUT)
    if not res.get("ok"):
        return JSONResponse(res, status_code=502)
    return res


@router.post("/sync/all")
def api_users_sync_all(
    request: Request,
    start_page: int = Query(1, ge=1),
    max_pages: int | None = Query(None, ge=1),
) -> Any:
    res = _service(request).sync_all_pages(start_page=start_page, max_pages=max_pages)
    if not res.get("ok"):
        return JSONResponse(res, status_code=502)
    return res
