"""Identity and role models for the access layer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


@dataclass(frozen=True, slots=True)
class Principal:
    """Verified identity for one request; never persisted."""

    email: str
    subject_id: str
    display_name: Optional[str] = None


class Role(str, Enum):
    MEMBER = "member"
    CLUB_MANAGER = "clubManager"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: str) -> Optional["Role"]:
        try:
            return cls(value)
        except ValueError:
            return None

    def satisfies(self, required: "Role") -> bool:
        return required in _SATISFIES[self]

    @property
    def is_admin(self) -> bool:
        return self is Role.ADMIN

    @property
    def is_manager_or_admin(self) -> bool:
        return self.satisfies(Role.CLUB_MANAGER)


_SATISFIES: dict[Role, frozenset[Role]] = {
    Role.ADMIN: frozenset({Role.ADMIN, Role.CLUB_MANAGER, Role.MEMBER}),
    Role.CLUB_MANAGER: frozenset({Role.CLUB_MANAGER, Role.MEMBER}),
    Role.MEMBER: frozenset({Role.MEMBER}),
}


class User(BaseModel):
    email: str
    name: str
    photo_url: Optional[str] = None
    role: Role
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class Actor:
    """A principal together with the role loaded from storage."""

    principal: Principal
    role: Role

    @property
    def email(self) -> str:
        return self.principal.email
