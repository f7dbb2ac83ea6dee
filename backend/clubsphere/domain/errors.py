"""Business error taxonomy shared by every core component."""

from __future__ import annotations

from fastapi import status


class DomainError(Exception):
    """Base class for errors that map onto a client-visible failure kind."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    detail: str = "domain_error"

    def __init__(self, detail: str | None = None, message: str | None = None) -> None:
        super().__init__(message or detail or self.detail)
        if detail:
            self.detail = detail
        self.message = message or self.detail


class Unauthenticated(DomainError):
    """No credential, a malformed one, or one the identity provider rejected."""

    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "unauthenticated"


class Forbidden(DomainError):
    """Role or ownership does not satisfy the requirement."""

    status_code = status.HTTP_403_FORBIDDEN
    detail = "forbidden"


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "not_found"


class InvalidInput(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "invalid_input"


class InvalidAmount(InvalidInput):
    detail = "invalid_amount"


class Unapproved(DomainError):
    """The owning club has not been approved by an admin."""

    status_code = status.HTTP_403_FORBIDDEN
    detail = "club_not_approved"


class AlreadyExists(DomainError):
    """An active membership or registration already exists for the pair."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "already_exists"


class PaymentRequired(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "payment_required"


class EventFull(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "event_full"


class PaymentProcessorError(Exception):
    """The external payment processor failed; reported as an infrastructure error, not a business one."""

    status_code = status.HTTP_502_BAD_GATEWAY
    detail = "payment_processor_unavailable"


class WebhookSignatureError(Exception):
    """A processor notification failed signature verification."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "invalid_signature"
