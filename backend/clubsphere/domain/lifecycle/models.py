"""Membership and event registration records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional
from uuid import UUID


class MembershipStatus(str, Enum):
    PENDING_PAYMENT = "pendingPayment"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class RegistrationStatus(str, Enum):
    REGISTERED = "registered"
    CANCELLED = "cancelled"


@dataclass
class Membership:
    id: UUID
    user_email: str
    club_id: UUID
    status: MembershipStatus
    payment_ref: Optional[str]
    joined_at: datetime
    cancelled_at: Optional[datetime] = None
    expired_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Membership":
        return cls(
            id=record["id"],
            user_email=record["user_email"],
            club_id=record["club_id"],
            status=MembershipStatus(record["status"]),
            payment_ref=record["payment_ref"],
            joined_at=record["joined_at"],
            cancelled_at=record.get("cancelled_at"),
            expired_at=record.get("expired_at"),
        )


@dataclass
class EventRegistration:
    id: UUID
    user_email: str
    event_id: UUID
    club_id: UUID
    status: RegistrationStatus
    payment_ref: Optional[str]
    registered_at: datetime
    cancelled_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "EventRegistration":
        return cls(
            id=record["id"],
            user_email=record["user_email"],
            event_id=record["event_id"],
            club_id=record["club_id"],
            status=RegistrationStatus(record["status"]),
            payment_ref=record["payment_ref"],
            registered_at=record["registered_at"],
            cancelled_at=record.get("cancelled_at"),
        )
