"""Request and response models for the REST surface (camelCase on the wire)."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from clubsphere.domain.access.models import User
from clubsphere.domain.clubs.models import Club, Event
from clubsphere.domain.lifecycle.models import EventRegistration, Membership
from clubsphere.domain.payments.models import Payment


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserRegisterRequest(CamelModel):
    name: Optional[str] = Field(default=None, max_length=120)
    photo_url: Optional[str] = Field(default=None, max_length=2048)


class RoleChangeRequest(CamelModel):
    role: str


class UserOut(CamelModel):
    email: str
    name: str
    photo_url: Optional[str] = None
    role: str
    created_at: datetime

    @classmethod
    def of(cls, user: User) -> "UserOut":
        return cls(
            email=user.email,
            name=user.name,
            photo_url=user.photo_url,
            role=user.role.value,
            created_at=user.created_at,
        )


class ClubCreateRequest(CamelModel):
    name: str = Field(min_length=1, max_length=120)
    description: str = Field(default="", max_length=4000)
    category: str = Field(default="", max_length=80)
    location: str = Field(default="", max_length=200)
    fee: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)


class ClubUpdateRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=4000)
    category: Optional[str] = Field(default=None, max_length=80)
    location: Optional[str] = Field(default=None, max_length=200)
    fee: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)


class ClubStatusRequest(CamelModel):
    status: str


class ClubOut(CamelModel):
    id: UUID
    name: str
    description: str
    category: str
    location: str
    fee: Decimal
    manager_email: str
    status: str
    created_at: datetime
    updated_at: datetime
    active_member_count: Optional[int] = None

    @classmethod
    def of(cls, club: Club, *, active_member_count: Optional[int] = None) -> "ClubOut":
        return cls(
            id=club.id,
            name=club.name,
            description=club.description,
            category=club.category,
            location=club.location,
            fee=club.fee,
            manager_email=club.manager_email,
            status=club.status.value,
            created_at=club.created_at,
            updated_at=club.updated_at,
            active_member_count=active_member_count,
        )


class EventCreateRequest(CamelModel):
    club_id: UUID
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=4000)
    event_date: datetime
    location: str = Field(default="", max_length=200)
    is_paid: bool = False
    fee: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    max_attendees: Optional[int] = Field(default=None, ge=1)


class EventOut(CamelModel):
    id: UUID
    club_id: UUID
    title: str
    description: str
    event_date: datetime
    location: str
    is_paid: bool
    fee: Decimal
    max_attendees: Optional[int] = None
    registered_count: Optional[int] = None

    @classmethod
    def of(cls, event: Event, *, registered_count: Optional[int] = None) -> "EventOut":
        return cls(
            id=event.id,
            club_id=event.club_id,
            title=event.title,
            description=event.description,
            event_date=event.event_date,
            location=event.location,
            is_paid=event.is_paid,
            fee=event.fee,
            max_attendees=event.max_attendees,
            registered_count=registered_count,
        )


class JoinRequest(CamelModel):
    club_id: UUID
    payment_ref: Optional[str] = None


class JoinResponse(CamelModel):
    membership_id: UUID
    status: str


class MembershipOut(CamelModel):
    id: UUID
    club_id: UUID
    user_email: str
    status: str
    payment_ref: Optional[str] = None
    joined_at: datetime
    cancelled_at: Optional[datetime] = None
    expired_at: Optional[datetime] = None

    @classmethod
    def of(cls, membership: Membership) -> "MembershipOut":
        return cls(
            id=membership.id,
            club_id=membership.club_id,
            user_email=membership.user_email,
            status=membership.status.value,
            payment_ref=membership.payment_ref,
            joined_at=membership.joined_at,
            cancelled_at=membership.cancelled_at,
            expired_at=membership.expired_at,
        )


class MembershipCheck(CamelModel):
    is_member: bool


class RegisterRequest(CamelModel):
    event_id: UUID
    payment_ref: Optional[str] = None


class RegisterResponse(CamelModel):
    registration_id: UUID
    status: str


class RegistrationOut(CamelModel):
    id: UUID
    event_id: UUID
    club_id: UUID
    user_email: str
    status: str
    payment_ref: Optional[str] = None
    registered_at: datetime
    cancelled_at: Optional[datetime] = None

    @classmethod
    def of(cls, registration: EventRegistration) -> "RegistrationOut":
        return cls(
            id=registration.id,
            event_id=registration.event_id,
            club_id=registration.club_id,
            user_email=registration.user_email,
            status=registration.status.value,
            payment_ref=registration.payment_ref,
            registered_at=registration.registered_at,
            cancelled_at=registration.cancelled_at,
        )


class RegistrationCheck(CamelModel):
    is_registered: bool


class CreateIntentRequest(CamelModel):
    type: Literal["membership", "event"]
    target_id: UUID


class CreateIntentResponse(CamelModel):
    processor_ref: str
    client_secret: str
    amount: Decimal
    currency: str


class PaymentOut(CamelModel):
    id: UUID
    user_email: str
    type: str
    target_id: UUID
    amount: Decimal
    currency: str
    processor_ref: str
    status: str
    created_at: datetime
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None

    @classmethod
    def of(cls, payment: Payment) -> "PaymentOut":
        return cls(
            id=payment.id,
            user_email=payment.user_email,
            type=payment.type.value,
            target_id=payment.target_id,
            amount=payment.amount,
            currency=payment.currency,
            processor_ref=payment.processor_ref,
            status=payment.status.value,
            created_at=payment.created_at,
            completed_at=payment.completed_at,
            failed_at=payment.failed_at,
        )


class PaymentCheck(CamelModel):
    has_paid: bool


class PaymentConfigOut(CamelModel):
    publishable_key: Optional[str] = None
    currency: str


class WebhookAck(BaseModel):
    received: bool = True
