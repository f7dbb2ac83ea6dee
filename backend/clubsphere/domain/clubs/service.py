"""Club and event administration."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional
from uuid import UUID

from clubsphere.domain.access.authority import RoleAuthority
from clubsphere.domain.access.models import Principal, Role
from clubsphere.domain.clubs.gate import ResourceGate
from clubsphere.domain.clubs.models import Club, ClubStatus, Event
from clubsphere.domain.clubs.repo import ClubsRepository
from clubsphere.domain.errors import InvalidAmount, InvalidInput, NotFound, Unapproved
from clubsphere.obs.logging import get_logger

logger = get_logger("clubsphere.clubs")


class ClubService:
    def __init__(self, clubs: ClubsRepository, gate: ResourceGate, authority: RoleAuthority) -> None:
        self._clubs = clubs
        self._gate = gate
        self._authority = authority

    async def create_club(
        self,
        principal: Principal,
        *,
        name: str,
        description: str = "",
        category: str = "",
        location: str = "",
        fee: Decimal = Decimal("0"),
    ) -> Club:
        """Create a club owned by the caller; it starts out pending approval."""
        await self._authority.authorize(principal, Role.CLUB_MANAGER)
        if not name.strip():
            raise InvalidInput("name_required")
        if fee < 0:
            raise InvalidAmount()
        club = await self._clubs.create_club(
            name=name.strip(),
            description=description,
            category=category,
            location=location,
            fee=fee,
            manager_email=principal.email,
        )
        logger.info("club.created", extra={"club_id": str(club.id), "manager_email": principal.email})
        return club

    async def update_club(self, principal: Principal, club_id: UUID, changes: Mapping[str, Any]) -> Club:
        actor = await self._authority.authorize(principal, Role.MEMBER)
        club = await self._gate.require_club(club_id)
        self._gate.require_owned_or_admin(club, actor)
        cleaned = {key: value for key, value in changes.items() if value is not None}
        if cleaned.get("fee") is not None and cleaned["fee"] < 0:
            raise InvalidAmount()
        if "name" in cleaned and not str(cleaned["name"]).strip():
            raise InvalidInput("name_required")
        updated = await self._clubs.update_club(club_id, cleaned)
        if updated is None:
            raise NotFound("club_not_found")
        return updated

    async def set_status(self, principal: Principal, club_id: UUID, status: str) -> Club:
        actor = await self._authority.authorize(principal, Role.ADMIN)
        try:
            new_status = ClubStatus(status)
        except ValueError as exc:
            raise InvalidInput("invalid_status") from exc
        updated = await self._clubs.set_status(club_id, new_status)
        if updated is None:
            raise NotFound("club_not_found")
        logger.info(
            "club.status_changed",
            extra={"club_id": str(club_id), "status": new_status.value, "changed_by": actor.email},
        )
        return updated

    async def get_club(self, club_id: UUID) -> Club:
        return await self._gate.require_club(club_id)

    async def create_event(
        self,
        principal: Principal,
        *,
        club_id: UUID,
        title: str,
        event_date: datetime,
        description: str = "",
        location: str = "",
        is_paid: bool = False,
        fee: Decimal = Decimal("0"),
        max_attendees: Optional[int] = None,
    ) -> Event:
        actor = await self._authority.authorize(principal, Role.MEMBER)
        club = await self._gate.require_club(club_id)
        self._gate.require_owned_or_admin(club, actor)
        if not club.is_approved:
            raise Unapproved()
        if not title.strip():
            raise InvalidInput("title_required")
        if max_attendees is not None and max_attendees < 1:
            raise InvalidInput("invalid_max_attendees")
        if not is_paid:
            fee = Decimal("0")
        elif fee <= 0:
            raise InvalidAmount()
        event = await self._clubs.create_event(
            club_id=club_id,
            title=title.strip(),
            description=description,
            event_date=event_date,
            location=location,
            is_paid=is_paid,
            fee=fee,
            max_attendees=max_attendees,
        )
        logger.info("event.created", extra={"event_id": str(event.id), "club_id": str(club_id)})
        return event

    async def get_event(self, event_id: UUID) -> Event:
        event, _ = await self._gate.require_event(event_id)
        return event
