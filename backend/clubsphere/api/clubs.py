"""Club and event administration routes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from clubsphere.api import schemas
from clubsphere.api.deps import get_container, get_principal
from clubsphere.container import ServiceContainer
from clubsphere.domain.access.models import Principal

router = APIRouter(tags=["clubs"])


@router.post("/clubs", response_model=schemas.ClubOut, status_code=status.HTTP_201_CREATED)
async def create_club(
    payload: schemas.ClubCreateRequest,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.ClubOut:
    club = await container.clubs.create_club(
        principal,
        name=payload.name,
        description=payload.description,
        category=payload.category,
        location=payload.location,
        fee=payload.fee,
    )
    return schemas.ClubOut.of(club, active_member_count=0)


@router.get("/clubs/{club_id}", response_model=schemas.ClubOut)
async def get_club(
    club_id: UUID,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.ClubOut:
    club = await container.clubs.get_club(club_id)
    count = await container.lifecycle.active_member_count(club_id)
    return schemas.ClubOut.of(club, active_member_count=count)


@router.patch("/clubs/{club_id}", response_model=schemas.ClubOut)
async def update_club(
    club_id: UUID,
    payload: schemas.ClubUpdateRequest,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.ClubOut:
    changes = payload.model_dump(exclude_unset=True)
    club = await container.clubs.update_club(principal, club_id, changes)
    return schemas.ClubOut.of(club)


@router.patch("/clubs/admin/{club_id}/status", response_model=schemas.ClubOut)
async def set_club_status(
    club_id: UUID,
    payload: schemas.ClubStatusRequest,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.ClubOut:
    club = await container.clubs.set_status(principal, club_id, payload.status)
    return schemas.ClubOut.of(club)


@router.post("/events", response_model=schemas.EventOut, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: schemas.EventCreateRequest,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.EventOut:
    event = await container.clubs.create_event(
        principal,
        club_id=payload.club_id,
        title=payload.title,
        event_date=payload.event_date,
        description=payload.description,
        location=payload.location,
        is_paid=payload.is_paid,
        fee=payload.fee,
        max_attendees=payload.max_attendees,
    )
    return schemas.EventOut.of(event, registered_count=0)


@router.get("/events/{event_id}", response_model=schemas.EventOut)
async def get_event(
    event_id: UUID,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.EventOut:
    event = await container.clubs.get_event(event_id)
    count = await container.lifecycle.registered_count(event_id)
    return schemas.EventOut.of(event, registered_count=count)
