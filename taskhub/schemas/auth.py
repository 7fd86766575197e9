"""
schemas/auth.py
---------------
Telegram init-data shapes and the authentication endpoint bodies.
"""

from typing import Optional

from pydantic import BaseModel, Field

from taskhub.schemas.user import UserRead


class TelegramUser(BaseModel):
    id: int
    first_name: str = ""
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None
    is_premium: Optional[bool] = None
    photo_url: Optional[str] = None


class TelegramChat(BaseModel):
    id: int
    type: str
    title: Optional[str] = None
    username: Optional[str] = None


class TelegramInitData(BaseModel):
    user: TelegramUser
    chat: Optional[TelegramChat] = None
    auth_date: Optional[int] = None
    query_id: Optional[str] = None
    start_param: Optional[str] = None


class TelegramAuthRequest(BaseModel):
    init_data: str = Field(
        ...,
        min_length=1,
        description="Raw Telegram.WebApp.initData query string",
    )


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserRead


class TokenCheckResponse(BaseModel):
    valid: bool = True
    user_id: str
    telegram_user_id: int
