"""
services/auth_service.py
------------------------
Telegram Mini App login: init-data in, session token out.

Flow (linear, no retries):
  1. Verify the init-data signature with the bot token.
  2. Parse the user sub-object.
  3. Map the Telegram id to an existing application user. Accounts are
     provisioned out-of-band; an unknown Telegram id is rejected, never
     auto-registered.
  4. Record the login and mint a session token.

Payload contents and tokens are never written to the log.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.config import Settings
from taskhub.core.errors import AccessDenied, AccountDeactivated, SignatureMismatch
from taskhub.core.logging import get_logger
from taskhub.core.security import create_session_token
from taskhub.core.telegram import parse_init_data, verify_init_data
from taskhub.models.user import User

logger = get_logger(__name__)


@dataclass
class IssuedSession:
    user: User
    access_token: str
    expires_in: int


class AuthService:

    @staticmethod
    async def authenticate_telegram(
        db: AsyncSession, init_data: str, settings: Settings
    ) -> IssuedSession:
        """
        Raises:
            SignatureMismatch: Signature invalid or auth_date too old.
            MalformedPayload: No usable user sub-object.
            AccessDenied: No application user for this Telegram id.
            AccountDeactivated: The matched user is inactive.
        """
        if not verify_init_data(
            init_data,
            settings.TELEGRAM_BOT_TOKEN,
            max_age_seconds=settings.TELEGRAM_INIT_DATA_MAX_AGE_SECONDS,
        ):
            logger.warning("Telegram init data failed signature verification")
            raise SignatureMismatch()

        payload = parse_init_data(init_data)
        telegram_user_id = payload.user.id

        result = await db.execute(
            select(User).where(User.telegram_user_id == telegram_user_id)
        )
        user = result.scalar_one_or_none()
        if user is None:
            logger.warning("Telegram login for unknown user", telegram_user_id=telegram_user_id)
            raise AccessDenied("User not registered. Contact your administrator.")
        if not user.is_active:
            logger.warning("Telegram login for deactivated user", user_id=user.id)
            raise AccountDeactivated()

        user.last_login_at = datetime.now(timezone.utc)
        await db.flush()
        await db.refresh(user)

        token = create_session_token(user.id, telegram_user_id, settings)
        logger.info("Session issued", user_id=user.id, company_id=user.company_id)
        return IssuedSession(
            user=user,
            access_token=token,
            expires_in=settings.session_token_ttl_seconds,
        )
