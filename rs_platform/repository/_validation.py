# rs_platform/repository/_validation.py
# Input checks run before any store or network call.
# Copyright (c) 2026 ReqresSync contributors
from __future__ import annotations

import re

from ..errors import ValidationError
from ..models import User

NAME_ERROR = "ERROR : Name cannot be empty and must contain only letters."
EMAIL_ERROR_ADD = "ERROR : Invalid email format."
EMAIL_ERROR_UPDATE = "ERROR : Invalid email format - failed to update user."

# local@domain.tld; same shape as the common mobile-platform address matcher
_EMAIL_RE = re.compile(
    r"[a-zA-Z0-9+._%\-]{1,256}"
    r"@"
    r"[a-zA-Z0-9][a-zA-Z0-9\-]{0,64}"
    r"(\.[a-zA-Z0-9][a-zA-Z0-9\-]{0,25})+"
)


def is_valid_name(text: str | None) -> bool:
    s = (text or "").strip()
    return bool(s) and all(c.isalpha() for c in s)


def is_valid_email(text: str | None) -> bool:
    s = (text or "").strip()
    return bool(s) and _EMAIL_RE.fullmatch(s) is not None


def validate_user(user: User, *, for_update: bool = False) -> None:
    if not is_valid_name(user.first_name) or not is_valid_name(user.last_name):
        raise ValidationError(NAME_ERROR)
    if not is_valid_email(user.email):
        raise ValidationError(EMAIL_ERROR_UPDATE if for_update else EMAIL_ERROR_ADD)


__all__ = [
    "is_valid_name",
    "is_valid_email",
    "validate_user",
    "NAME_ERROR",
    "EMAIL_ERROR_ADD",
    "EMAIL_ERROR_UPDATE",
]
