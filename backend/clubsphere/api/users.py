"""User registration and role administration."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from clubsphere.api import schemas
from clubsphere.api.deps import get_container, get_principal
from clubsphere.container import ServiceContainer
from clubsphere.domain.access.models import Principal

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", response_model=schemas.UserOut, status_code=status.HTTP_201_CREATED)
async def register_user(
    payload: schemas.UserRegisterRequest,
    response: Response,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.UserOut:
    user, created = await container.authority.register_user(principal, name=payload.name, photo_url=payload.photo_url)
    if not created:
        response.status_code = status.HTTP_200_OK
    return schemas.UserOut.of(user)


@router.get("/me", response_model=schemas.UserOut)
async def get_me(
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.UserOut:
    return schemas.UserOut.of(await container.authority.get_user(principal.email))


@router.get("", response_model=List[schemas.UserOut])
async def list_users(
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> List[schemas.UserOut]:
    users = await container.authority.list_users(principal)
    return [schemas.UserOut.of(user) for user in users]


@router.patch("/role/{email}", response_model=schemas.UserOut)
async def change_role(
    email: str,
    payload: schemas.RoleChangeRequest,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.UserOut:
    user = await container.authority.set_role(principal, email, payload.role)
    return schemas.UserOut.of(user)
