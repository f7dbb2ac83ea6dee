"""Payment ledger records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional
from uuid import UUID


class PaymentType(str, Enum):
    MEMBERSHIP = "membership"
    EVENT = "event"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Payment:
    id: UUID
    user_email: str
    type: PaymentType
    target_id: UUID
    amount: Decimal
    currency: str
    processor_ref: str
    status: PaymentStatus
    created_at: datetime
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status is PaymentStatus.COMPLETED

    def matches(self, user_email: str, type_: PaymentType, target_id: UUID) -> bool:
        return self.user_email == user_email and self.type is type_ and self.target_id == target_id

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Payment":
        return cls(
            id=record["id"],
            user_email=record["user_email"],
            type=PaymentType(record["type"]),
            target_id=record["target_id"],
            amount=Decimal(record["amount"]),
            currency=record["currency"],
            processor_ref=record["processor_ref"],
            status=PaymentStatus(record["status"]),
            created_at=record["created_at"],
            completed_at=record.get("completed_at"),
            failed_at=record.get("failed_at"),
        )


@dataclass(frozen=True)
class PaymentIntent:
    """A freshly created ledger entry plus the secret the client confirms with."""

    payment: Payment
    client_secret: str
