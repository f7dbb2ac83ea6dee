import json
import logging

import pytest
from httpx import AsyncClient

from clubsphere.domain.access.models import Role
from clubsphere.obs.logging import JSONLogFormatter
from clubsphere.settings import settings


@pytest.mark.asyncio
async def test_liveness_and_readiness(api_client: AsyncClient):
    live = await api_client.get("/health/live")
    assert live.json() == {"status": "ok"}
    assert live.headers.get("X-Request-Id")

    ready = await api_client.get("/health/ready")
    assert ready.status_code == 200
    assert ready.json()["postgres"] == "ok"
    assert ready.json()["redis"] == "ok"


@pytest.mark.asyncio
async def test_request_id_is_echoed(api_client: AsyncClient):
    resp = await api_client.get("/health/live", headers={"X-Request-Id": "req-123"})
    assert resp.headers["X-Request-Id"] == "req-123"


@pytest.mark.asyncio
async def test_metrics_requires_admin_unless_public(api_client: AsyncClient, store, auth_headers, monkeypatch):
    store.add_user("root@x.com", Role.ADMIN)
    store.add_user("a@x.com")
    monkeypatch.setattr(settings, "metrics_public", False)
    assert (await api_client.get("/metrics")).status_code == 401
    assert (await api_client.get("/metrics", headers=auth_headers("a@x.com"))).status_code == 403
    admin = await api_client.get("/metrics", headers=auth_headers("root@x.com"))
    assert admin.status_code == 200
    assert "clubsphere_http_requests_total" in admin.text

    monkeypatch.setattr(settings, "metrics_public", True)
    assert (await api_client.get("/metrics")).status_code == 200


@pytest.mark.asyncio
async def test_unexpected_errors_render_internal_error(api_client: AsyncClient, container, auth_headers, monkeypatch):
    async def _boom(principal, club_id):
        raise RuntimeError("storage exploded")

    monkeypatch.setattr(container.lifecycle, "is_member", _boom)
    resp = await api_client.get(
        "/memberships/check/00000000-0000-0000-0000-000000000001", headers=auth_headers("a@x.com")
    )
    assert resp.status_code == 500
    assert resp.json()["detail"] == "internal_error"


class _FormattedRecords(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.setFormatter(JSONLogFormatter())
        self.lines: list[dict] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.lines.append(json.loads(self.format(record)))


@pytest.mark.asyncio
async def test_handler_log_lines_carry_route(api_client: AsyncClient, store, auth_headers, caplog):
    caplog.set_level(logging.INFO, logger="clubsphere")
    club = store.add_club()
    handler = _FormattedRecords()
    lifecycle_logger = logging.getLogger("clubsphere.lifecycle")
    lifecycle_logger.addHandler(handler)
    try:
        resp = await api_client.post(
            "/memberships/join",
            json={"clubId": str(club.id)},
            headers={**auth_headers("a@x.com"), "X-Request-Id": "req-route"},
        )
    finally:
        lifecycle_logger.removeHandler(handler)
    assert resp.status_code == 201
    joined = [line for line in handler.lines if line["msg"] == "membership.joined"]
    assert joined
    assert joined[0]["route"] == "/memberships/join"
    assert joined[0]["request_id"] == "req-route"
