# Public surface of the repository package.
from ._allocator import first_gap, next_available_id
from ._fetch import fetch_page_with_retry, fetch_page_result_with_retry
from ._reconcile import reconcile_and_insert
from ._validation import is_valid_email, is_valid_name, validate_user
from .facade import Callback, UserRepository, callback_from

__all__ = [
    "UserRepository",
    "Callback",
    "callback_from",
    "fetch_page_with_retry",
    "fetch_page_result_with_retry",
    "reconcile_and_insert",
    "first_gap",
    "next_available_id",
    "is_valid_name",
    "is_valid_email",
    "validate_user",
]
