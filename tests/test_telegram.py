"""Telegram init-data signature verification and parsing."""

import json

import pytest

from taskhub.core.errors import MalformedPayload
from taskhub.core.telegram import build_data_check_string, parse_init_data, verify_init_data

from conftest import BOT_TOKEN, sign_init_data, telegram_fields


# Signed independently of this package with Telegram's documented scheme:
# secret = HMAC_SHA256(key="WebAppData", msg=bot_token), hash = hex HMAC_SHA256(secret, data_check_string)
KNOWN_BOT_TOKEN = "5768337691:AAH5YkoiEuPk8-FZa32hStHTqXiLPtAEhx8"
KNOWN_INIT_DATA = (
    "user=%7B%22id%22%3A279058397%2C%22first_name%22%3A%22Vlad%22%2C%22username%22%3A%22vdkfrost%22%7D"
    "&auth_date=1710000000"
    "&query_id=AAHdF6IQAAAAAN0XohDhrOrc"
    "&hash=72b60ecb2b4c2df8f5362637cbac770c89337f2d34eff9c0d4e9c346aeae0840"
)


def test_known_init_data_verifies():
    assert verify_init_data(KNOWN_INIT_DATA, KNOWN_BOT_TOKEN) is True
    assert verify_init_data(KNOWN_INIT_DATA, BOT_TOKEN) is False
    assert parse_init_data(KNOWN_INIT_DATA).user.id == 279058397


def test_correctly_signed_payload_verifies():
    init_data = sign_init_data(telegram_fields(42))
    assert verify_init_data(init_data, BOT_TOKEN) is True


def test_tampered_auth_date_fails():
    init_data = sign_init_data(telegram_fields(42, auth_date=1700000000))
    tampered = init_data.replace("auth_date=1700000000", "auth_date=1800000000")
    assert tampered != init_data
    assert verify_init_data(tampered, BOT_TOKEN) is False


def test_tampered_user_fails():
    init_data = sign_init_data(telegram_fields(42))
    tampered = init_data.replace("%22id%22%3A42", "%22id%22%3A43")
    assert tampered != init_data
    assert verify_init_data(tampered, BOT_TOKEN) is False


def test_other_bot_token_fails():
    init_data = sign_init_data(telegram_fields(42), bot_token="999:OTHER")
    assert verify_init_data(init_data, BOT_TOKEN) is False


def test_missing_hash_fails():
    init_data = sign_init_data(telegram_fields(42))
    without_hash = "&".join(p for p in init_data.split("&") if not p.startswith("hash="))
    assert verify_init_data(without_hash, BOT_TOKEN) is False


@pytest.mark.parametrize("garbage", ["", "not a query string", "hash"])
def test_unparseable_payload_fails_without_raising(garbage):
    assert verify_init_data(garbage, BOT_TOKEN) is False


def test_stale_auth_date_rejected_when_max_age_set():
    init_data = sign_init_data(telegram_fields(42, auth_date=1700000000))
    assert verify_init_data(init_data, BOT_TOKEN, max_age_seconds=60, now=1700000030) is True
    assert verify_init_data(init_data, BOT_TOKEN, max_age_seconds=60, now=1700000061) is False


def test_data_check_string_is_sorted_and_excludes_hash():
    pairs = [("user", "u"), ("hash", "h"), ("auth_date", "1"), ("query_id", "q")]
    assert build_data_check_string(pairs) == "auth_date=1\nquery_id=q\nuser=u"


def test_parse_extracts_user_and_chat():
    chat = json.dumps({"id": -100, "type": "group", "title": "Team"})
    payload = parse_init_data(sign_init_data(telegram_fields(42, chat=chat)))
    assert payload.user.id == 42
    assert payload.user.username == "tg42"
    assert payload.chat.title == "Team"
    assert payload.auth_date == 1700000000


def test_parse_without_user_is_malformed():
    with pytest.raises(MalformedPayload):
        parse_init_data(sign_init_data({"auth_date": "1700000000"}))


def test_parse_with_invalid_user_json_is_malformed():
    with pytest.raises(MalformedPayload):
        parse_init_data(sign_init_data({"auth_date": "1", "user": "{not json"}))
