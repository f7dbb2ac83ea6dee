"""Event registration routes."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from clubsphere.api import schemas
from clubsphere.api.deps import get_container, get_principal
from clubsphere.container import ServiceContainer
from clubsphere.domain.access.models import Principal

router = APIRouter(prefix="/event-registrations", tags=["event-registrations"])


@router.post("/register", response_model=schemas.RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register_for_event(
    payload: schemas.RegisterRequest,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.RegisterResponse:
    registration = await container.lifecycle.register(principal, payload.event_id, payload.payment_ref)
    return schemas.RegisterResponse(registration_id=registration.id, status=registration.status.value)


@router.get("/check/{event_id}", response_model=schemas.RegistrationCheck)
async def check_registration(
    event_id: UUID,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.RegistrationCheck:
    return schemas.RegistrationCheck(is_registered=await container.lifecycle.is_registered(principal, event_id))


@router.get("/my-registrations", response_model=List[schemas.RegistrationOut])
async def my_registrations(
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> List[schemas.RegistrationOut]:
    registrations = await container.lifecycle.registrations_of(principal)
    return [schemas.RegistrationOut.of(item) for item in registrations]


@router.delete("/{registration_id}", response_model=schemas.RegistrationOut)
async def cancel_registration(
    registration_id: UUID,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.RegistrationOut:
    registration = await container.lifecycle.cancel_registration(principal, registration_id)
    return schemas.RegistrationOut.of(registration)
