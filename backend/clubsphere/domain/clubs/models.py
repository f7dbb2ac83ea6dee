"""Domain models for clubs and events."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional
from uuid import UUID


class ClubStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class Club:
    id: UUID
    name: str
    description: str
    category: str
    location: str
    fee: Decimal
    manager_email: str
    status: ClubStatus
    created_at: datetime
    updated_at: datetime

    @property
    def is_approved(self) -> bool:
        return self.status is ClubStatus.APPROVED

    @property
    def requires_payment(self) -> bool:
        return self.fee > 0

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Club":
        return cls(
            id=record["id"],
            name=record["name"],
            description=record["description"],
            category=record["category"],
            location=record["location"],
            fee=Decimal(record["fee"]),
            manager_email=record["manager_email"],
            status=ClubStatus(record["status"]),
            created_at=record["created_at"],
            updated_at=record["updated_at"],
        )


@dataclass
class Event:
    id: UUID
    club_id: UUID
    title: str
    description: str
    event_date: datetime
    location: str
    is_paid: bool
    fee: Decimal
    max_attendees: Optional[int]
    created_at: datetime
    updated_at: datetime

    @property
    def requires_payment(self) -> bool:
        return self.is_paid and self.fee > 0

    @property
    def is_capped(self) -> bool:
        return self.max_attendees is not None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Event":
        return cls(
            id=record["id"],
            club_id=record["club_id"],
            title=record["title"],
            description=record["description"],
            event_date=record["event_date"],
            location=record["location"],
            is_paid=bool(record["is_paid"]),
            fee=Decimal(record["fee"]),
            max_attendees=record["max_attendees"],
            created_at=record["created_at"],
            updated_at=record["updated_at"],
        )
