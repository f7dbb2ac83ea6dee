"""Attendee caps for events."""

from __future__ import annotations

from clubsphere.domain.clubs.models import Event
from clubsphere.domain.errors import EventFull
from clubsphere.domain.lifecycle.repo import RegistrationsRepository


class CapacityEnforcer:
    """Checks an event's cap before a registration is written.

    The count and the insert are separate statements, so two concurrent
    registrations for the last seat can both pass and over-admit by the
    number of racers.
    """

    def __init__(self, registrations: RegistrationsRepository) -> None:
        self._registrations = registrations

    async def check_and_reserve(self, event: Event) -> None:
        if not event.is_capped:
            return
        registered = await self._registrations.registered_count(event.id)
        if registered >= event.max_attendees:
            raise EventFull()
