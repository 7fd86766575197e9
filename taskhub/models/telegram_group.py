"""
models/telegram_group.py
------------------------
Binding between a company and a Telegram group chat.

Only bindings with provider_type == DEFAULT_PROVIDER_TYPE are managed by this
service; rows of other providers share the table but are never exposed.
"""

import uuid
from typing import Optional

from sqlalchemy import BigInteger, Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from taskhub.db.base import Base, CompanyScoped, TimestampMixin

DEFAULT_PROVIDER_TYPE = "dc"


class TelegramChatBinding(Base, CompanyScoped, TimestampMixin):
    __tablename__ = "tg_chat_bindings"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    chat_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    provider_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DEFAULT_PROVIDER_TYPE
    )
    provider_config_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    # User id of the default assignee, or a symbolic option understood by the bot
    default_assignee_option: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<TelegramChatBinding id={self.id} chat_id={self.chat_id}>"
