"""Turns a bearer credential into a verified Principal."""

from __future__ import annotations

from typing import Optional

from jwt import PyJWTError

from clubsphere.domain.access.models import Principal
from clubsphere.domain.errors import Unauthenticated
from clubsphere.infra.identity import IdentityProvider
from clubsphere.obs.logging import get_logger

logger = get_logger("clubsphere.access")


class PrincipalResolver:
    def __init__(self, provider: IdentityProvider) -> None:
        self._provider = provider

    async def resolve(self, credential: Optional[str]) -> Principal:
        if not credential or not credential.strip():
            raise Unauthenticated("missing_credential")
        token = credential.strip()
        if token.count(".") != 2:
            raise Unauthenticated("malformed_credential")
        try:
            identity = await self._provider.verify(token)
        except PyJWTError as exc:
            logger.info("credential_rejected", extra={"reason": str(exc) or exc.__class__.__name__})
            raise Unauthenticated("invalid_credential") from exc
        return Principal(
            email=identity.email,
            subject_id=identity.subject_id,
            display_name=identity.display_name,
        )
