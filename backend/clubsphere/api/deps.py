"""FastAPI dependencies: container lookup, principal resolution, role checks."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from clubsphere.container import ServiceContainer
from clubsphere.domain.access.models import Actor, Principal, Role

_bearer = HTTPBearer(auto_error=False)


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


async def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    container: ServiceContainer = Depends(get_container),
) -> Principal:
    token = credentials.credentials if credentials else None
    return await container.resolver.resolve(token)


def require_role(required: Role):
    """Dependency factory: the caller must be a registered user whose role satisfies ``required``."""

    async def _dependency(
        principal: Principal = Depends(get_principal),
        container: ServiceContainer = Depends(get_container),
    ) -> Actor:
        return await container.authority.authorize(principal, required)

    return _dependency


require_admin = require_role(Role.ADMIN)
