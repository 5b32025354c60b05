# rs_platform: local cache, remote paging and the repository that keeps them in step.
from .errors import (
    ExhaustedRetries,
    NotFound,
    PersistenceError,
    SyncError,
    TransportError,
    UnsuccessfulResponse,
    ValidationError,
)
from .models import PageResult, Support, User

__all__ = [
    "User",
    "Support",
    "PageResult",
    "SyncError",
    "TransportError",
    "UnsuccessfulResponse",
    "ExhaustedRetries",
    "PersistenceError",
    "NotFound",
    "ValidationError",
]
