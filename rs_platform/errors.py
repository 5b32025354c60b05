# rs_platform/errors.py
# Error taxonomy shared by the remote source, the store and the repository.
# Copyright (c) 2026 ReqresSync contributors
from __future__ import annotations

from typing import Any


class SyncError(RuntimeError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransportError(SyncError): ...


class UnsuccessfulResponse(SyncError):
    def __init__(self, message: str, *, status: int | None = None):
        super().__init__(message)
        self.status = status


class ExhaustedRetries(SyncError):
    """Terminal fetch failure; `cause` is the error of the last attempt."""

    def __init__(self, cause: SyncError, attempts: int):
        if isinstance(cause, TransportError):
            message = f"Network error after {attempts} attempts."
        else:
            message = f"API call failed after {attempts} attempts."
        super().__init__(message)
        self.cause = cause
        self.attempts = attempts


class PersistenceError(SyncError): ...


class NotFound(SyncError):
    def __init__(self, user_id: Any):
        super().__init__(f"User not found with ID: {user_id}")
        self.user_id = user_id


class ValidationError(SyncError): ...


RETRYABLE = (TransportError, UnsuccessfulResponse)

__all__ = [
    "SyncError",
    "TransportError",
    "UnsuccessfulResponse",
    "ExhaustedRetries",
    "PersistenceError",
    "NotFound",
    "ValidationError",
    "RETRYABLE",
]
