"""Thread-safe in-memory storage for user records."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from .models import User, UserPatch


class UserStore:
    """Create, read, update and delete users under a single lock.

    Every public method holds the lock for its whole read-modify-write, so
    concurrent callers observe the operations in some serial order. Missing
    records are reported through the return value, never by raising.
    """

    def __init__(self) -> None:
        self._users: Dict[int, User] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def list(self) -> List[User]:
        with self._lock:
            return sorted(self._users.values(), key=lambda user: user.id)

    def get(self, user_id: int) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def create(self, name: str, lastname: str) -> User:
        with self._lock:
            user = User(id=self._next_id, name=name, lastname=lastname)
            self._next_id += 1
            self._users[user.id] = user
            return user

    def replace(self, user_id: int, name: str, lastname: str) -> User:
        """Store ``name`` and ``lastname`` under ``user_id`` whether or not it exists."""
        user = User(id=user_id, name=name, lastname=lastname)
        with self._lock:
            self._users[user_id] = user
        return user

    def partial_update(self, user_id: int, patch: UserPatch) -> Optional[User]:
        with self._lock:
            current = self._users.get(user_id)
            if current is None:
                return None
            updated = patch.apply(current)
            self._users[user_id] = updated
            return updated

    def delete(self, user_id: int) -> bool:
        with self._lock:
            return self._users.pop(user_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._users.clear()
            self._next_id = 1


__all__ = ["UserStore"]
