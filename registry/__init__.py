"""In-memory user registry served over HTTP."""

from __future__ import annotations

from typing import Any

from .models import User, UserPatch
from .store import UserStore


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the registry ASGI application."""

    from .api import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "User",
    "UserPatch",
    "UserStore",
    "create_app",
]
