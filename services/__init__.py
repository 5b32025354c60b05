# services/__init__.py
from __future__ import annotations

from .users import LogNotifier, Messages, Notifier, Outcome, UserService, wait_for

__all__ = ["UserService", "Messages", "Notifier", "LogNotifier", "Outcome", "wait_for"]
