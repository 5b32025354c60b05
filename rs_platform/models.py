# rs_platform/models.py
# Records and page envelopes exchanged between the remote source, the store and callers.
# Copyright (c) 2026 ReqresSync contributors
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from collections.abc import Mapping
from typing import Any

from .errors import UnsuccessfulResponse

USER_FIELDS = ("id", "email", "first_name", "last_name", "avatar")


def _text(v: Any) -> str:
    return "" if v is None else str(v)


@dataclass(frozen=True)
class User:
    id: int
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    avatar: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "User":
        if not isinstance(data, Mapping):
            raise ValueError("user record must be an object")
        raw_id = data.get("id")
        if isinstance(raw_id, bool) or raw_id is None:
            raise ValueError("user record has no id")
        try:
            uid = int(raw_id)
        except (TypeError, ValueError):
            raise ValueError(f"user record has a non-integer id: {raw_id!r}") from None
        return cls(
            id=uid,
            email=_text(data.get("email")),
            first_name=_text(data.get("first_name")),
            last_name=_text(data.get("last_name")),
            avatar=_text(data.get("avatar")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def with_id(self, new_id: int) -> "User":
        return replace(self, id=int(new_id))

    def with_avatar(self, avatar: str) -> "User":
        return replace(self, avatar=_text(avatar))

    def normalized(self) -> "User":
        """Copy with surrounding whitespace stripped from the typed-in fields."""
        return replace(
            self,
            email=self.email.strip(),
            first_name=self.first_name.strip(),
            last_name=self.last_name.strip(),
        )


@dataclass(frozen=True)
class Support:
    url: str = ""
    text: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Support | None":
        if not isinstance(data, Mapping):
            return None
        return cls(url=_text(data.get("url")), text=_text(data.get("text")))


@dataclass
class PageResult:
    records: list[User]
    page: int
    per_page: int = 0
    total: int = 0
    total_pages: int = 0
    support: Support | None = None

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @classmethod
    def from_payload(cls, payload: Any, *, page: int | None = None) -> "PageResult":
        """Parse a `/api/users` body; anything malformed is an unsuccessful response."""
        if not isinstance(payload, Mapping) or not payload:
            raise UnsuccessfulResponse("empty or malformed response body")
        data = payload.get("data")
        if not isinstance(data, list):
            raise UnsuccessfulResponse("response body has no data list")
        try:
            records = [User.from_dict(x) for x in data]
        except ValueError as e:
            raise UnsuccessfulResponse(f"malformed user record: {e}") from None

        def _num(key: str, default: int) -> int:
            try:
                return int(payload.get(key, default))
            except (TypeError, ValueError):
                return default

        return cls(
            records=records,
            page=_num("page", page or 0),
            per_page=_num("per_page", len(records)),
            total=_num("total", len(records)),
            total_pages=_num("total_pages", 0),
            support=Support.from_dict(payload.get("support")),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "page": self.page,
            "per_page": self.per_page,
            "total": self.total,
            "total_pages": self.total_pages,
            "data": [u.to_dict() for u in self.records],
        }
        if self.support is not None:
            out["support"] = asdict(self.support)
        return out


@dataclass
class RetryState:
    page: int
    remaining_retries: int
    attempts: int = 0
    last_error: Exception | None = field(default=None, repr=False)


__all__ = ["User", "Support", "PageResult", "RetryState", "USER_FIELDS"]
