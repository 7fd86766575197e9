"""
api/routes/auth.py
------------------
Telegram Mini App authentication endpoints. Both are public paths: the
session gateway lets them through without a token.

POST /api/auth/telegram  - Exchange signed init data for a session token.
GET  /api/auth/telegram  - Check a bearer session token.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Header

from taskhub.core.errors import InvalidSessionToken
from taskhub.core.security import decode_session_token, extract_bearer_token
from taskhub.dependencies import AppSettings, DbSession
from taskhub.schemas.auth import TelegramAuthRequest, TokenCheckResponse, TokenResponse
from taskhub.schemas.user import UserRead
from taskhub.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post(
    "/telegram",
    response_model=TokenResponse,
    summary="Login with Telegram Mini App init data",
)
async def telegram_login(
    body: TelegramAuthRequest,
    db: DbSession,
    settings: AppSettings,
) -> TokenResponse:
    """
    Verify the init-data signature, map the Telegram id to an existing
    account and issue a 30-day session token. Unknown Telegram users are
    rejected with 403; accounts are never created here.
    """
    session = await AuthService.authenticate_telegram(db, body.init_data, settings)
    return TokenResponse(
        access_token=session.access_token,
        token_type="bearer",
        expires_in=session.expires_in,
        user=UserRead.model_validate(session.user),
    )


@router.get(
    "/telegram",
    response_model=TokenCheckResponse,
    summary="Validate a session token",
)
async def check_token(
    settings: AppSettings,
    authorization: Annotated[Optional[str], Header()] = None,
) -> TokenCheckResponse:
    token = extract_bearer_token(authorization)
    if not token:
        raise InvalidSessionToken("No token provided")
    claims = decode_session_token(token, settings)
    return TokenCheckResponse(
        valid=True,
        user_id=claims.user_id,
        telegram_user_id=claims.telegram_user_id,
    )
