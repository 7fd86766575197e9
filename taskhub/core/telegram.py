"""
core/telegram.py
----------------
Telegram Mini App "init data" verification and parsing.

Signing scheme (fixed by Telegram):
  secret_key       = HMAC_SHA256(key="WebAppData", msg=<bot token>)
  data_check_string = "\n".join(sorted("key=value" for every field but hash))
  hash             = hex(HMAC_SHA256(key=secret_key, msg=data_check_string))

The bot token is the secret here; the hash travels in the clear.
"""

import hashlib
import hmac
import json
import time
from typing import Iterable, Optional
from urllib.parse import parse_qsl

from pydantic import ValidationError

from taskhub.core.errors import MalformedPayload
from taskhub.schemas.auth import TelegramChat, TelegramInitData, TelegramUser

WEB_APP_DATA_KEY = b"WebAppData"


def _split_pairs(init_data: str) -> list[tuple[str, str]]:
    return parse_qsl(init_data, keep_blank_values=True, strict_parsing=True)


def build_data_check_string(pairs: Iterable[tuple[str, str]]) -> str:
    return "\n".join(sorted(f"{key}={value}" for key, value in pairs if key != "hash"))


def compute_init_data_hash(pairs: Iterable[tuple[str, str]], bot_token: str) -> str:
    secret_key = hmac.new(WEB_APP_DATA_KEY, bot_token.encode(), hashlib.sha256).digest()
    data_check_string = build_data_check_string(pairs)
    return hmac.new(secret_key, data_check_string.encode(), hashlib.sha256).hexdigest()


def verify_init_data(
    init_data: str,
    bot_token: str,
    max_age_seconds: int = 0,
    now: Optional[float] = None,
) -> bool:
    """
    Check the signature of an init-data query string.

    Returns False on any parse failure, missing hash, mismatch or (when
    max_age_seconds > 0) a stale auth_date. Never raises.
    """
    if not init_data or not bot_token:
        return False
    try:
        pairs = _split_pairs(init_data)
    except ValueError:
        return False

    provided = next((value for key, value in pairs if key == "hash"), None)
    if not provided:
        return False

    expected = compute_init_data_hash(pairs, bot_token)
    if not hmac.compare_digest(expected, provided):
        return False

    if max_age_seconds > 0:
        auth_date = next((value for key, value in pairs if key == "auth_date"), None)
        try:
            age = (now if now is not None else time.time()) - int(auth_date)
        except (TypeError, ValueError):
            return False
        if age > max_age_seconds:
            return False

    return True


def parse_init_data(init_data: str) -> TelegramInitData:
    """
    Decode the structured fields of a (previously verified) init-data string.

    Raises:
        MalformedPayload: If the user sub-object is absent or not valid JSON
            of the expected shape.
    """
    try:
        fields = dict(_split_pairs(init_data))
    except ValueError as exc:
        raise MalformedPayload("Init data is not a valid query string") from exc

    raw_user = fields.get("user")
    if not raw_user:
        raise MalformedPayload("No user data found")

    try:
        user = TelegramUser.model_validate(json.loads(raw_user))
        chat = (
            TelegramChat.model_validate(json.loads(fields["chat"]))
            if fields.get("chat")
            else None
        )
        auth_date = int(fields["auth_date"]) if fields.get("auth_date") else None
    except (ValueError, ValidationError) as exc:
        raise MalformedPayload("Invalid user data") from exc

    return TelegramInitData(
        user=user,
        chat=chat,
        auth_date=auth_date,
        query_id=fields.get("query_id"),
        start_param=fields.get("start_param"),
    )
