"""
core/security.py
----------------
Session token utilities.

Design decisions:
  - A session token is a stateless HS256 JWT binding the application user id
    ('sub') to the Telegram identity it was issued for ('telegram_user_id').
  - Validity window is SESSION_TOKEN_EXPIRE_DAYS (30 days) from issuance.
    There is no server-side revocation list; rotating SECRET_KEY invalidates
    every outstanding token.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from taskhub.core.config import Settings
from taskhub.core.errors import InvalidSessionToken


@dataclass(frozen=True)
class SessionClaims:
    user_id: str
    telegram_user_id: int
    issued_at: datetime


def create_session_token(
    user_id: str,
    telegram_user_id: int,
    settings: Settings,
    issued_at: Optional[datetime] = None,
) -> str:
    """
    Mint a session token.

    Args:
        user_id: Application user UUID (stored in 'sub' claim).
        telegram_user_id: Numeric Telegram id the login was verified for.
        settings: Supplies SECRET_KEY, ALGORITHM and the expiry window.
        issued_at: Override for the issuance instant; defaults to now.

    Returns:
        Signed JWT string.
    """
    issued_at = issued_at or datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": user_id,
        "telegram_user_id": telegram_user_id,
        "iat": issued_at,
        "exp": issued_at + timedelta(days=settings.SESSION_TOKEN_EXPIRE_DAYS),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_session_token(token: str, settings: Settings) -> SessionClaims:
    """
    Verify signature and expiry of a session token.

    Raises:
        InvalidSessionToken: If the token is invalid, expired, tampered with
            or lacks the expected claims.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise InvalidSessionToken("Invalid token") from exc

    user_id = payload.get("sub")
    telegram_user_id = payload.get("telegram_user_id")
    issued_at = payload.get("iat")
    if not user_id or telegram_user_id is None or issued_at is None:
        raise InvalidSessionToken("Invalid token")

    return SessionClaims(
        user_id=str(user_id),
        telegram_user_id=int(telegram_user_id),
        issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
    )


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token part of an 'Authorization: Bearer <token>' header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
