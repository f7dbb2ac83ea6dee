"""ASGI entrypoint for the ClubSphere API."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clubsphere import obs
from clubsphere.api import clubs, memberships, ops, payments, registrations, users
from clubsphere.api.errors import install_error_handlers
from clubsphere.container import build_container
from clubsphere.infra import migrations, postgres
from clubsphere.infra import redis as redis_infra
from clubsphere.infra.identity import build_identity_provider
from clubsphere.infra.scheduler import JobScheduler
from clubsphere.infra.stripe_gateway import StripePaymentProcessor
from clubsphere.obs.logging import get_logger
from clubsphere.obs.middleware import bind_route
from clubsphere.settings import settings

logger = get_logger("clubsphere.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    pool = await postgres.init_pool()
    redis_client = redis_infra.create_client(settings.redis_url)
    scheduler: JobScheduler | None = None
    try:
        if settings.postgres_auto_migrate:
            await migrations.apply_pending(pool)
        container = build_container(
            config=settings,
            pool=pool,
            redis_client=redis_client,
            identity_provider=build_identity_provider(settings),
            processor=StripePaymentProcessor(settings.stripe_secret_key, settings.stripe_webhook_secret),
        )
        app.state.container = container
        if settings.expiry_sweep_enabled:
            scheduler = JobScheduler()
            scheduler.start()
            scheduler.schedule_every(
                "lifecycle-expiry-sweep",
                container.sweeper.run_once,
                minutes=settings.expiry_sweep_interval_minutes,
            )
            app.state.scheduler = scheduler
        logger.info("startup_complete", extra={"environment": settings.environment})
        yield
    finally:
        if scheduler is not None:
            scheduler.shutdown()
        await redis_infra.close_client(redis_client)
        await postgres.close_pool(pool)


app = FastAPI(title="ClubSphere API", lifespan=lifespan, dependencies=[Depends(bind_route)])
install_error_handlers(app)

allow_origins = list(settings.cors_allow_origins)
if not allow_origins:
    allow_origins = ["http://localhost:5173"] if settings.is_dev() else []

# Starlette disallows wildcard '*' with allow_credentials=True.
if "*" in allow_origins:
    allow_origins = ["http://localhost:5173", "http://127.0.0.1:5173"] if settings.is_dev() else []

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

obs.init(app)

app.include_router(users.router)
app.include_router(clubs.router)
app.include_router(memberships.router)
app.include_router(registrations.router)
app.include_router(payments.router)
app.include_router(ops.router)
