import os
import sys
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Optional
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from fakeredis.aioredis import FakeRedis

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

os.environ.setdefault("IDENTITY_PROVIDER", "local")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test")
os.environ.setdefault("EXPIRY_SWEEP_ENABLED", "false")

from clubsphere.container import build_container
from clubsphere.domain.access.models import Role, User
from clubsphere.domain.clubs.models import Club, ClubStatus, Event
from clubsphere.domain.errors import AlreadyExists, PaymentRequired
from clubsphere.domain.lifecycle.models import (
    EventRegistration,
    Membership,
    MembershipStatus,
    RegistrationStatus,
)
from clubsphere.domain.payments.models import Payment, PaymentStatus, PaymentType
from clubsphere.domain.payments.processor import ProcessorIntent, ProcessorOutcome
from clubsphere.infra.identity import LocalJWTIdentityProvider
from clubsphere.infra.stripe_gateway import StripePaymentProcessor
from clubsphere.main import app
from clubsphere.settings import settings


def _now() -> datetime:
    return datetime.now(timezone.utc)


class _FakeConnection:
    async def fetchval(self, query, *args):
        if "schema_migrations" in query:
            return "0001"
        return 1


class _FakeAcquire:
    def __init__(self, conn):
        self._conn = conn

    async def __aenter__(self):
        return self._conn

    async def __aexit__(self, exc_type, exc, tb):
        return False


class _FakePool:
    def __init__(self, conn=None):
        self._conn = conn or _FakeConnection()

    def acquire(self):
        return _FakeAcquire(self._conn)


class FakeUsersRepository:
    def __init__(self) -> None:
        self.rows: dict[str, User] = {}

    async def get(self, email):
        return self.rows.get(email)

    async def create_if_absent(self, *, email, name, photo_url):
        if email in self.rows:
            return self.rows[email], False
        now = _now()
        user = User(email=email, name=name, photo_url=photo_url, role=Role.MEMBER, created_at=now, updated_at=now)
        self.rows[email] = user
        return user, True

    async def set_role(self, email, role):
        user = self.rows.get(email)
        if user is None:
            return None
        updated = user.model_copy(update={"role": role, "updated_at": _now()})
        self.rows[email] = updated
        return updated

    async def list_all(self):
        return list(self.rows.values())


class FakeClubsRepository:
    def __init__(self) -> None:
        self.clubs: dict[UUID, Club] = {}
        self.events: dict[UUID, Event] = {}

    async def get_club(self, club_id):
        return self.clubs.get(club_id)

    async def create_club(self, *, name, description, category, location, fee, manager_email):
        now = _now()
        club = Club(
            id=uuid4(),
            name=name,
            description=description,
            category=category,
            location=location,
            fee=Decimal(fee),
            manager_email=manager_email,
            status=ClubStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        self.clubs[club.id] = club
        return club

    async def update_club(self, club_id, changes):
        club = self.clubs.get(club_id)
        if club is None:
            return None
        allowed = {key: value for key, value in changes.items() if key in ("name", "description", "category", "location", "fee")}
        updated = replace(club, updated_at=_now(), **allowed)
        self.clubs[club_id] = updated
        return updated

    async def set_status(self, club_id, status):
        club = self.clubs.get(club_id)
        if club is None:
            return None
        updated = replace(club, status=status, updated_at=_now())
        self.clubs[club_id] = updated
        return updated

    async def get_event(self, event_id):
        return self.events.get(event_id)

    async def create_event(self, *, club_id, title, description, event_date, location, is_paid, fee, max_attendees):
        now = _now()
        event = Event(
            id=uuid4(),
            club_id=club_id,
            title=title,
            description=description,
            event_date=event_date,
            location=location,
            is_paid=is_paid,
            fee=Decimal(fee),
            max_attendees=max_attendees,
            created_at=now,
            updated_at=now,
        )
        self.events[event.id] = event
        return event


class FakePaymentsRepository:
    def __init__(self) -> None:
        self.rows: dict[str, Payment] = {}

    async def insert_pending(self, *, user_email, type_, target_id, amount, currency, processor_ref):
        payment = Payment(
            id=uuid4(),
            user_email=user_email,
            type=type_,
            target_id=target_id,
            amount=Decimal(amount),
            currency=currency,
            processor_ref=processor_ref,
            status=PaymentStatus.PENDING,
            created_at=_now(),
        )
        self.rows[processor_ref] = payment
        return payment

    async def get_by_ref(self, processor_ref):
        return self.rows.get(processor_ref)

    async def mark_completed(self, processor_ref):
        payment = self.rows.get(processor_ref)
        if payment is None or payment.status is not PaymentStatus.PENDING:
            return None
        updated = replace(payment, status=PaymentStatus.COMPLETED, completed_at=_now())
        self.rows[processor_ref] = updated
        return updated

    async def mark_failed(self, processor_ref):
        payment = self.rows.get(processor_ref)
        if payment is None or payment.status is not PaymentStatus.PENDING:
            return None
        updated = replace(payment, status=PaymentStatus.FAILED, failed_at=_now())
        self.rows[processor_ref] = updated
        return updated

    async def has_completed(self, user_email, type_, target_id):
        return any(p.is_completed and p.matches(user_email, type_, target_id) for p in self.rows.values())

    async def list_for_user(self, user_email):
        return [p for p in self.rows.values() if p.user_email == user_email]

    async def list_all(self, *, limit=200):
        return list(self.rows.values())[:limit]

    async def fail_stale_pending(self, cutoff):
        stale = [ref for ref, p in self.rows.items() if p.status is PaymentStatus.PENDING and p.created_at < cutoff]
        for ref in stale:
            self.rows[ref] = replace(self.rows[ref], status=PaymentStatus.FAILED, failed_at=_now())
        return len(stale)


class FakeMembershipsRepository:
    """Emulates the partial unique indexes on memberships."""

    def __init__(self) -> None:
        self.rows: dict[UUID, Membership] = {}

    async def get(self, membership_id):
        return self.rows.get(membership_id)

    async def find_active(self, user_email, club_id):
        for row in self.rows.values():
            if row.user_email == user_email and row.club_id == club_id and row.status is MembershipStatus.ACTIVE:
                return row
        return None

    async def insert_active(self, *, user_email, club_id, payment_ref):
        if await self.find_active(user_email, club_id) is not None:
            raise AlreadyExists("already_member")
        if payment_ref and any(row.payment_ref == payment_ref for row in self.rows.values()):
            raise PaymentRequired("payment_already_applied")
        membership = Membership(
            id=uuid4(),
            user_email=user_email,
            club_id=club_id,
            status=MembershipStatus.ACTIVE,
            payment_ref=payment_ref,
            joined_at=_now(),
        )
        self.rows[membership.id] = membership
        return membership

    async def mark_cancelled(self, membership_id):
        row = self.rows.get(membership_id)
        if row is None or row.status not in (MembershipStatus.ACTIVE, MembershipStatus.PENDING_PAYMENT):
            return None
        updated = replace(row, status=MembershipStatus.CANCELLED, cancelled_at=_now())
        self.rows[membership_id] = updated
        return updated

    async def list_for_user(self, user_email):
        return [row for row in self.rows.values() if row.user_email == user_email]

    async def active_count(self, club_id):
        return sum(1 for row in self.rows.values() if row.club_id == club_id and row.status is MembershipStatus.ACTIVE)

    async def expire_pending(self, cutoff):
        stale = [
            key
            for key, row in self.rows.items()
            if row.status is MembershipStatus.PENDING_PAYMENT and row.joined_at < cutoff
        ]
        for key in stale:
            self.rows[key] = replace(self.rows[key], status=MembershipStatus.EXPIRED, expired_at=_now())
        return len(stale)


class FakeRegistrationsRepository:
    """Emulates the partial unique indexes on event registrations."""

    def __init__(self) -> None:
        self.rows: dict[UUID, EventRegistration] = {}

    async def get(self, registration_id):
        return self.rows.get(registration_id)

    async def find_registered(self, user_email, event_id):
        for row in self.rows.values():
            if row.user_email == user_email and row.event_id == event_id and row.status is RegistrationStatus.REGISTERED:
                return row
        return None

    async def insert_registered(self, *, user_email, event_id, club_id, payment_ref):
        if await self.find_registered(user_email, event_id) is not None:
            raise AlreadyExists("already_registered")
        if payment_ref and any(row.payment_ref == payment_ref for row in self.rows.values()):
            raise PaymentRequired("payment_already_applied")
        registration = EventRegistration(
            id=uuid4(),
            user_email=user_email,
            event_id=event_id,
            club_id=club_id,
            status=RegistrationStatus.REGISTERED,
            payment_ref=payment_ref,
            registered_at=_now(),
        )
        self.rows[registration.id] = registration
        return registration

    async def mark_cancelled(self, registration_id):
        row = self.rows.get(registration_id)
        if row is None or row.status is not RegistrationStatus.REGISTERED:
            return None
        updated = replace(row, status=RegistrationStatus.CANCELLED, cancelled_at=_now())
        self.rows[registration_id] = updated
        return updated

    async def list_for_user(self, user_email):
        return [row for row in self.rows.values() if row.user_email == user_email]

    async def registered_count(self, event_id):
        return sum(
            1 for row in self.rows.values() if row.event_id == event_id and row.status is RegistrationStatus.REGISTERED
        )


class FakeProcessor(StripePaymentProcessor):
    """Real Stripe webhook verification; intents and polling stay in memory."""

    def __init__(self, webhook_secret: str) -> None:
        super().__init__(None, webhook_secret)
        self.created: list[dict] = []
        self.outcomes: dict[str, ProcessorOutcome] = {}

    async def create_intent(self, *, amount_minor, currency, metadata):
        ref = f"pi_test_{len(self.created) + 1}"
        self.created.append({"amount_minor": amount_minor, "currency": currency, "metadata": dict(metadata), "ref": ref})
        return ProcessorIntent(processor_ref=ref, client_secret=f"{ref}_secret_abc")

    async def retrieve_outcome(self, processor_ref):
        return self.outcomes.get(processor_ref, ProcessorOutcome.PENDING)


class Store:
    """In-memory repositories plus seeding helpers."""

    def __init__(self) -> None:
        self.users = FakeUsersRepository()
        self.clubs = FakeClubsRepository()
        self.payments = FakePaymentsRepository()
        self.memberships = FakeMembershipsRepository()
        self.registrations = FakeRegistrationsRepository()

    def add_user(self, email: str, role: Role = Role.MEMBER) -> User:
        now = _now()
        user = User(email=email, name=email.split("@")[0], photo_url=None, role=role, created_at=now, updated_at=now)
        self.users.rows[email] = user
        return user

    def add_club(
        self,
        *,
        manager_email: str = "manager@x.com",
        fee: str = "0",
        status: ClubStatus = ClubStatus.APPROVED,
    ) -> Club:
        now = _now()
        club = Club(
            id=uuid4(),
            name="Chess Club",
            description="",
            category="games",
            location="Hall A",
            fee=Decimal(fee),
            manager_email=manager_email,
            status=status,
            created_at=now,
            updated_at=now,
        )
        self.clubs.clubs[club.id] = club
        return club

    def add_event(self, club: Club, *, fee: str = "0", max_attendees: Optional[int] = None) -> Event:
        now = _now()
        event = Event(
            id=uuid4(),
            club_id=club.id,
            title="Open Night",
            description="",
            event_date=now,
            location="Hall A",
            is_paid=Decimal(fee) > 0,
            fee=Decimal(fee),
            max_attendees=max_attendees,
            created_at=now,
            updated_at=now,
        )
        self.clubs.events[event.id] = event
        return event

    def add_payment(
        self,
        *,
        user_email: str,
        type_: PaymentType,
        target_id: UUID,
        amount: str = "25.00",
        status: PaymentStatus = PaymentStatus.COMPLETED,
        processor_ref: Optional[str] = None,
    ) -> Payment:
        ref = processor_ref or f"pi_seed_{uuid4().hex[:12]}"
        payment = Payment(
            id=uuid4(),
            user_email=user_email,
            type=type_,
            target_id=target_id,
            amount=Decimal(amount),
            currency="usd",
            processor_ref=ref,
            status=status,
            created_at=_now(),
            completed_at=_now() if status is PaymentStatus.COMPLETED else None,
        )
        self.payments.rows[ref] = payment
        return payment


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
    client = FakeRedis(decode_responses=True)
    try:
        yield client
    finally:
        await client.flushall()


@pytest.fixture
def store() -> Store:
    return Store()


@pytest.fixture
def identity() -> LocalJWTIdentityProvider:
    return LocalJWTIdentityProvider(
        settings.secret_key,
        issuer=settings.local_token_issuer,
        audience=settings.local_token_audience,
    )


@pytest.fixture
def processor() -> FakeProcessor:
    return FakeProcessor(settings.stripe_webhook_secret or "whsec_test")


@pytest.fixture
def container(store, identity, processor, fake_redis):
    return build_container(
        config=settings,
        pool=_FakePool(),
        redis_client=fake_redis,
        identity_provider=identity,
        processor=processor,
        users=store.users,
        clubs=store.clubs,
        payments=store.payments,
        memberships=store.memberships,
        registrations=store.registrations,
    )


@pytest.fixture
def auth_headers(identity):
    def _headers(email: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {identity.issue(email)}"}

    return _headers


@pytest_asyncio.fixture
async def api_client(container):
    app.state.container = container
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    try:
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
    finally:
        del app.state.container
