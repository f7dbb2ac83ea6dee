import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_second_registrant_hits_capacity(api_client: AsyncClient, store, auth_headers):
    event = store.add_event(store.add_club(), max_attendees=1)
    first = await api_client.post(
        "/event-registrations/register", json={"eventId": str(event.id)}, headers=auth_headers("b@x.com")
    )
    assert first.status_code == 201
    assert first.json()["status"] == "registered"

    second = await api_client.post(
        "/event-registrations/register", json={"eventId": str(event.id)}, headers=auth_headers("c@x.com")
    )
    assert second.status_code == 400
    assert second.json()["detail"] == "event_full"


@pytest.mark.asyncio
async def test_check_list_and_cancel_registration(api_client: AsyncClient, store, auth_headers):
    event = store.add_event(store.add_club())
    headers = auth_headers("b@x.com")
    created = await api_client.post("/event-registrations/register", json={"eventId": str(event.id)}, headers=headers)
    registration_id = created.json()["registrationId"]

    check = await api_client.get(f"/event-registrations/check/{event.id}", headers=headers)
    assert check.json() == {"isRegistered": True}

    mine = await api_client.get("/event-registrations/my-registrations", headers=headers)
    assert mine.json()[0]["eventId"] == str(event.id)

    forbidden = await api_client.delete(f"/event-registrations/{registration_id}", headers=auth_headers("x@x.com"))
    assert forbidden.status_code == 403

    cancelled = await api_client.delete(f"/event-registrations/{registration_id}", headers=headers)
    assert cancelled.status_code == 200
    check = await api_client.get(f"/event-registrations/check/{event.id}", headers=headers)
    assert check.json() == {"isRegistered": False}


@pytest.mark.asyncio
async def test_paid_event_without_payment(api_client: AsyncClient, store, auth_headers):
    event = store.add_event(store.add_club(), fee="12.50")
    resp = await api_client.post(
        "/event-registrations/register", json={"eventId": str(event.id)}, headers=auth_headers("b@x.com")
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "payment_required"
