from uuid import uuid4

import pytest

from clubsphere.domain.access.authority import RoleAuthority
from clubsphere.domain.clubs.gate import ResourceGate
from clubsphere.domain.clubs.models import ClubStatus
from clubsphere.domain.errors import NotFound, Unapproved


@pytest.fixture
def gate(store):
    return ResourceGate(store.clubs, RoleAuthority(store.users))


@pytest.mark.asyncio
async def test_require_club_missing(gate):
    with pytest.raises(NotFound):
        await gate.require_club(uuid4())


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [ClubStatus.PENDING, ClubStatus.REJECTED])
async def test_require_approved_club_rejects_unapproved(store, gate, status):
    club = store.add_club(status=status)
    assert (await gate.require_club(club.id)).id == club.id
    with pytest.raises(Unapproved):
        await gate.require_approved_club(club.id)


@pytest.mark.asyncio
async def test_require_event_checks_owning_club(store, gate):
    club = store.add_club(status=ClubStatus.PENDING)
    event = store.add_event(club)
    with pytest.raises(Unapproved):
        await gate.require_event(event.id)
    store.clubs.clubs[club.id].status = ClubStatus.APPROVED
    found, owner = await gate.require_event(event.id)
    assert found.id == event.id
    assert owner.id == club.id


@pytest.mark.asyncio
async def test_require_event_missing(gate):
    with pytest.raises(NotFound) as excinfo:
        await gate.require_event(uuid4())
    assert excinfo.value.detail == "event_not_found"
