"""Operations endpoints: liveness, readiness and metrics."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from clubsphere.api.deps import get_container
from clubsphere.container import ServiceContainer
from clubsphere.domain.access.models import Role
from clubsphere.infra import migrations, postgres
from clubsphere.infra import redis as redis_infra
from clubsphere.obs import metrics as obs_metrics

router = APIRouter(prefix="", tags=["ops"])

_bearer = HTTPBearer(auto_error=False)


async def require_metrics_access(
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
	container: ServiceContainer = Depends(get_container),
) -> None:
	if container.settings.metrics_public:
		return
	principal = await container.resolver.resolve(credentials.credentials if credentials else None)
	await container.authority.authorize(principal, Role.ADMIN)


@router.get("/health/live")
async def live() -> dict:
	return {"status": "ok"}


@router.get("/health/ready")
async def ready(container: ServiceContainer = Depends(get_container)) -> JSONResponse:
	pg_ok = await postgres.ping_pool(container.pool)
	redis_ok = await redis_infra.ping(container.redis)
	obs_metrics.mark_postgres(pg_ok)
	obs_metrics.mark_redis(redis_ok)
	body = {
		"status": "ok" if pg_ok and redis_ok else ("degraded" if pg_ok else "unavailable"),
		"postgres": "ok" if pg_ok else "down",
		"redis": "ok" if redis_ok else "down",
	}
	if pg_ok:
		body["schema"] = await migrations.current_version(container.pool)
	code = status.HTTP_200_OK if pg_ok else status.HTTP_503_SERVICE_UNAVAILABLE
	return JSONResponse(status_code=code, content=body)


@router.get("/metrics", dependencies=[Depends(require_metrics_access)])
async def metrics() -> Response:
	return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
