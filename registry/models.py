"""Domain models for the user registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class User:
    """Represents a user record held by the registry."""

    id: int
    name: str
    lastname: str


@dataclass(frozen=True)
class UserPatch:
    """Partial update for a :class:`User`; ``None`` leaves a field unchanged."""

    name: Optional[str] = None
    lastname: Optional[str] = None

    @staticmethod
    def from_mapping(data: Mapping[str, str]) -> "UserPatch":
        """Build a patch from raw request data, dropping unrecognised keys."""
        return UserPatch(name=data.get("name"), lastname=data.get("lastname"))

    def apply(self, user: User) -> User:
        return User(
            id=user.id,
            name=self.name if self.name is not None else user.name,
            lastname=self.lastname if self.lastname is not None else user.lastname,
        )


__all__ = ["User", "UserPatch"]
