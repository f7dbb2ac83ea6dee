"""Identity provider adapters.

Two providers verify bearer credentials:

- ``FirebaseIdentityProvider`` checks Firebase ID tokens (RS256) against
  Google's published signing keys.
- ``LocalJWTIdentityProvider`` checks HS256 tokens signed with the
  application's secret key; used for local development and tests.

Both raise ``jwt.InvalidTokenError`` subclasses on failure.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

import jwt
from jwt import InvalidTokenError, PyJWKClient

from clubsphere.settings import Settings


FIREBASE_JWKS_URL = "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com"
FIREBASE_ISSUER_PREFIX = "https://securetoken.google.com/"


@dataclass(frozen=True, slots=True)
class VerifiedIdentity:
	email: str
	subject_id: str
	display_name: Optional[str]
	verified_at: datetime


class IdentityProvider(Protocol):
	async def verify(self, token: str) -> VerifiedIdentity: ...


def _identity_from_claims(claims: Dict[str, Any]) -> VerifiedIdentity:
	email = claims.get("email")
	if not email or not isinstance(email, str):
		raise InvalidTokenError("missing_claim:email")
	subject = claims.get("sub") or claims.get("user_id")
	if not subject:
		raise InvalidTokenError("missing_claim:sub")
	return VerifiedIdentity(
		email=email,
		subject_id=str(subject),
		display_name=claims.get("name"),
		verified_at=datetime.now(timezone.utc),
	)


class FirebaseIdentityProvider:
	def __init__(self, project_id: str, *, jwks_client: Optional[PyJWKClient] = None) -> None:
		if not project_id:
			raise ValueError("firebase_project_id is required for the firebase identity provider")
		self._project_id = project_id
		self._jwks = jwks_client or PyJWKClient(FIREBASE_JWKS_URL, cache_keys=True)

	def _decode(self, token: str) -> Dict[str, Any]:
		signing_key = self._jwks.get_signing_key_from_jwt(token)
		return jwt.decode(
			token,
			signing_key.key,
			algorithms=["RS256"],
			audience=self._project_id,
			issuer=f"{FIREBASE_ISSUER_PREFIX}{self._project_id}",
			leeway=5,
			options={"require": ["exp", "iat", "iss", "aud", "sub"]},
		)

	async def verify(self, token: str) -> VerifiedIdentity:
		# key fetch is blocking I/O
		claims = await asyncio.to_thread(self._decode, token)
		return _identity_from_claims(claims)


class LocalJWTIdentityProvider:
	def __init__(self, secret: str, *, issuer: str, audience: str) -> None:
		self._secret = secret
		self._issuer = issuer
		self._audience = audience

	def issue(self, email: str, *, subject_id: Optional[str] = None, name: Optional[str] = None, ttl_seconds: int = 3600) -> str:
		"""Encode a token this provider will accept."""
		now = int(time.time())
		body: Dict[str, Any] = {
			"iss": self._issuer,
			"aud": self._audience,
			"iat": now,
			"exp": now + ttl_seconds,
			"sub": subject_id or email,
			"email": email,
		}
		if name:
			body["name"] = name
		return jwt.encode(body, self._secret, algorithm="HS256")

	async def verify(self, token: str) -> VerifiedIdentity:
		claims = jwt.decode(
			token,
			self._secret,
			algorithms=["HS256"],
			audience=self._audience,
			issuer=self._issuer,
			leeway=5,
			options={"require": ["exp", "iat", "iss", "aud", "sub"]},
		)
		return _identity_from_claims(claims)


def build_identity_provider(config: Settings) -> IdentityProvider:
	kind = config.identity_provider.strip().lower()
	if kind == "firebase":
		return FirebaseIdentityProvider(config.firebase_project_id or "")
	if kind == "local":
		return LocalJWTIdentityProvider(
			config.secret_key,
			issuer=config.local_token_issuer,
			audience=config.local_token_audience,
		)
	raise ValueError(f"unknown identity provider: {config.identity_provider}")
