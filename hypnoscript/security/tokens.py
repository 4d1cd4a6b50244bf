"""Issuing and validating stateless session JWTs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import jwt

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_TTL = timedelta(days=7)
DEFAULT_ISSUER = "hypnoscript.auth"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Identity asserted by a verified session token."""

    account_id: str
    email: str
    issued_at: datetime
    expires_at: datetime


class TokenIssuer:
    """Mint and verify signed, time-bounded session tokens.

    No revocation list is kept: a token stays valid until its embedded expiry,
    whatever happens to the account or the client session afterwards.
    """

    def __init__(
        self,
        secret: str,
        *,
        ttl: timedelta = DEFAULT_TTL,
        issuer: str = DEFAULT_ISSUER,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Store the signing secret, expiry policy, and clock.

        Parameters
        ----------
        secret:
            Process-wide HMAC key, provisioned by configuration.
        ttl:
            Lifetime applied to every issued token.
        issuer:
            Value written to and required in the ``iss`` claim.
        clock:
            Returns the current UTC time; tests inject a fixed clock.
        """
        if not secret:
            raise ValueError("token signing secret must not be empty")
        if ttl <= timedelta(0):
            raise ValueError("token ttl must be positive")
        self._secret = secret
        self._ttl = ttl
        self._issuer = issuer
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, account_id: str, email: str) -> str:
        """Return a signed JWT asserting ``account_id`` and ``email``."""
        now = int(self._clock().timestamp())
        payload: dict[str, Any] = {
            "iss": self._issuer,
            "sub": account_id,
            "email": email,
            "iat": now,
            "exp": now + int(self._ttl.total_seconds()),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> TokenClaims | None:
        """Return the token's claims, or ``None`` if it is malformed, tampered, or expired.

        Callers get no indication of which check failed.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                issuer=self._issuer,
                # expiry is checked below against the injected clock
                options={
                    "require": ["sub", "email", "iat", "exp"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.PyJWTError as exc:
            logger.debug("token rejected: %s", exc)
            return None

        subject = payload["sub"]
        email = payload["email"]
        issued_at = payload["iat"]
        expires_at = payload["exp"]
        if not isinstance(subject, str) or not isinstance(email, str):
            logger.debug("token rejected: non-string identity claims")
            return None
        if not isinstance(issued_at, int) or not isinstance(expires_at, int):
            logger.debug("token rejected: non-integer time claims")
            return None
        if int(self._clock().timestamp()) >= expires_at:
            logger.debug("token rejected: expired")
            return None

        return TokenClaims(
            account_id=subject,
            email=email,
            issued_at=datetime.fromtimestamp(issued_at, timezone.utc),
            expires_at=datetime.fromtimestamp(expires_at, timezone.utc),
        )
