"""Contract between the ledger and an external payment processor."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Protocol


class ProcessorOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PENDING = "pending"


@dataclass(frozen=True)
class ProcessorIntent:
    processor_ref: str
    client_secret: str


@dataclass(frozen=True)
class ProcessorNotification:
    processor_ref: str
    outcome: ProcessorOutcome
    event_type: str


class PaymentProcessor(Protocol):
    async def create_intent(
        self,
        *,
        amount_minor: int,
        currency: str,
        metadata: Mapping[str, str],
    ) -> ProcessorIntent: ...

    async def retrieve_outcome(self, processor_ref: str) -> ProcessorOutcome: ...

    def parse_notification(self, payload: bytes, signature: Optional[str]) -> Optional[ProcessorNotification]:
        """Verify and decode a webhook body; None for event types the ledger ignores."""
        ...
