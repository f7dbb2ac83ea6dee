"""Resource gate: existence and approval checks ahead of any state change."""

from __future__ import annotations

from uuid import UUID

from clubsphere.domain.access.authority import RoleAuthority
from clubsphere.domain.access.models import Actor
from clubsphere.domain.clubs.models import Club, Event
from clubsphere.domain.clubs.repo import ClubsRepository
from clubsphere.domain.errors import NotFound, Unapproved


class ResourceGate:
    def __init__(self, clubs: ClubsRepository, authority: RoleAuthority) -> None:
        self._clubs = clubs
        self._authority = authority

    async def require_club(self, club_id: UUID) -> Club:
        club = await self._clubs.get_club(club_id)
        if club is None:
            raise NotFound("club_not_found")
        return club

    async def require_approved_club(self, club_id: UUID) -> Club:
        club = await self.require_club(club_id)
        if not club.is_approved:
            raise Unapproved()
        return club

    async def require_event(self, event_id: UUID) -> tuple[Event, Club]:
        """Return the event and its owning club; the club must be approved."""
        event = await self._clubs.get_event(event_id)
        if event is None:
            raise NotFound("event_not_found")
        club = await self._clubs.get_club(event.club_id)
        if club is None:
            raise NotFound("club_not_found")
        if not club.is_approved:
            raise Unapproved()
        return event, club

    def require_owned_or_admin(self, club: Club, actor: Actor) -> None:
        # events inherit ownership from their club
        self._authority.require_owned_or_admin(actor, club.manager_email)
