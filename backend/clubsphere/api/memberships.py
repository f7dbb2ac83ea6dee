"""Membership lifecycle routes."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from clubsphere.api import schemas
from clubsphere.api.deps import get_container, get_principal
from clubsphere.container import ServiceContainer
from clubsphere.domain.access.models import Principal

router = APIRouter(prefix="/memberships", tags=["memberships"])


@router.post("/join", response_model=schemas.JoinResponse, status_code=status.HTTP_201_CREATED)
async def join_club(
    payload: schemas.JoinRequest,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.JoinResponse:
    membership = await container.lifecycle.join(principal, payload.club_id, payload.payment_ref)
    return schemas.JoinResponse(membership_id=membership.id, status=membership.status.value)


@router.get("/check/{club_id}", response_model=schemas.MembershipCheck)
async def check_membership(
    club_id: UUID,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.MembershipCheck:
    return schemas.MembershipCheck(is_member=await container.lifecycle.is_member(principal, club_id))


@router.get("/my-memberships", response_model=List[schemas.MembershipOut])
async def my_memberships(
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> List[schemas.MembershipOut]:
    memberships = await container.lifecycle.memberships_of(principal)
    return [schemas.MembershipOut.of(item) for item in memberships]


@router.delete("/{membership_id}", response_model=schemas.MembershipOut)
async def cancel_membership(
    membership_id: UUID,
    principal: Principal = Depends(get_principal),
    container: ServiceContainer = Depends(get_container),
) -> schemas.MembershipOut:
    membership = await container.lifecycle.cancel_membership(principal, membership_id)
    return schemas.MembershipOut.of(membership)
