"""Role lookups, capability checks and role administration."""

from __future__ import annotations

from typing import Optional

from clubsphere.domain.access.models import Actor, Principal, Role, User
from clubsphere.domain.access.repo import UsersRepository
from clubsphere.domain.errors import Forbidden, InvalidInput, NotFound
from clubsphere.obs.logging import get_logger

logger = get_logger("clubsphere.access")


class RoleAuthority:
    def __init__(self, users: UsersRepository) -> None:
        self._users = users

    async def role_of(self, principal: Principal) -> Role:
        user = await self._users.get(principal.email)
        if user is None:
            raise NotFound("user_not_found")
        return user.role

    async def authorize(self, principal: Principal, required: Role) -> Actor:
        """Load the caller's role and require it to satisfy ``required``."""
        role = await self.role_of(principal)
        if not role.satisfies(required):
            raise Forbidden("insufficient_role")
        return Actor(principal=principal, role=role)

    @staticmethod
    def owns_resource(principal: Principal, owner_email: str) -> bool:
        return principal.email == owner_email

    def require_owned_or_admin(self, actor: Actor, owner_email: str) -> None:
        if actor.role.is_admin or self.owns_resource(actor.principal, owner_email):
            return
        raise Forbidden("not_owner")

    async def register_user(self, principal: Principal, *, name: Optional[str], photo_url: Optional[str]) -> tuple[User, bool]:
        display = (name or principal.display_name or principal.email.split("@", 1)[0]).strip()
        user, created = await self._users.create_if_absent(email=principal.email, name=display, photo_url=photo_url)
        if created:
            logger.info("user.registered", extra={"user_email": principal.email})
        return user, created

    async def get_user(self, email: str) -> User:
        user = await self._users.get(email)
        if user is None:
            raise NotFound("user_not_found")
        return user

    async def list_users(self, caller: Principal) -> list[User]:
        await self.authorize(caller, Role.ADMIN)
        return await self._users.list_all()

    async def set_role(self, caller: Principal, target_email: str, requested_role: str) -> User:
        await self.authorize(caller, Role.ADMIN)
        if target_email == caller.email:
            raise Forbidden("cannot_change_own_role")
        role = Role.parse(requested_role)
        if role is None:
            raise InvalidInput("invalid_role")
        updated = await self._users.set_role(target_email, role)
        if updated is None:
            raise NotFound("user_not_found")
        logger.info(
            "role.changed",
            extra={"user_email": target_email, "role": role.value, "changed_by": caller.email},
        )
        return updated
