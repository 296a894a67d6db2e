"""
JWT utilities for issuing and verifying administrator access tokens.

Functions
---------
create_access_token(data: dict, settings: Settings) -> str
    Creates a signed JWT access token with an expiration (`exp`) claim.
verify_token(token: str | None, settings: Settings) -> TokenVerification
    Verifies a JWT's signature & expiration and returns either the claims or
    the reason the token was rejected.
bearer_token(authorization: str | None) -> str | None
    Extracts the token from an ``Authorization: Bearer <token>`` header.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from tyrebot.database.config.config import Settings


class TokenFailure(str, Enum):
    MISSING = "missing"
    EXPIRED = "expired"
    INVALID = "invalid"


@dataclass(frozen=True)
class TokenVerification:
    """Outcome of a token check: ``claims`` when valid, otherwise ``failure``."""
    claims: Optional[dict] = None
    failure: Optional[TokenFailure] = None

    @property
    def valid(self) -> bool:
        return self.claims is not None


def create_access_token(data: dict, settings: Settings) -> str:
    """
    Create a signed JWT access token.

    Notes
    ----------
    - Adds an `exp` (expiration) claim calculated from ACCESS_TOKEN_EXPIRE_MINUTES.
    - Uses `settings.SECRET_KEY` and `settings.ALGORITHM` for signing.
    """
    encoding = data.copy()
    expires = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    encoding.update({"exp": int(expires.timestamp())})
    return jwt.encode(encoding, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: Optional[str], settings: Settings) -> TokenVerification:
    """
    Verify a JWT and return its claims or the failure reason.
    """
    if not token:
        return TokenVerification(failure=TokenFailure.MISSING)
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        return TokenVerification(failure=TokenFailure.EXPIRED)
    except JWTError:
        return TokenVerification(failure=TokenFailure.INVALID)
    if not payload.get("sub"):
        return TokenVerification(failure=TokenFailure.INVALID)
    return TokenVerification(claims=payload)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
