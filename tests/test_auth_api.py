"""POST/GET /api/auth/telegram."""

from taskhub.core.security import decode_session_token
from taskhub.models import User

from conftest import sign_init_data, telegram_fields


def test_login_issues_token_for_known_user(client, seed, settings):
    company = seed.company()
    user_id = seed.user(company, telegram_user_id=5001, name="Alice")

    response = client.post(
        "/api/auth/telegram", json={"init_data": sign_init_data(telegram_fields(5001))}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["expires_in"] == 30 * 24 * 60 * 60
    assert body["user"]["id"] == user_id
    claims = decode_session_token(body["access_token"], settings)
    assert claims.user_id == user_id
    assert claims.telegram_user_id == 5001
    assert seed.get(User, user_id).last_login_at is not None


def test_unknown_telegram_user_gets_no_token(client, seed):
    seed.company()
    response = client.post(
        "/api/auth/telegram", json={"init_data": sign_init_data(telegram_fields(9999))}
    )
    assert response.status_code == 403
    assert "access_token" not in response.json()


def test_deactivated_user_rejected(client, seed):
    user_id = seed.user(seed.company(), telegram_user_id=5002, is_active=False)
    response = client.post(
        "/api/auth/telegram", json={"init_data": sign_init_data(telegram_fields(5002))}
    )
    assert response.status_code == 403
    assert response.json()["detail"] == "Account is deactivated"
    assert seed.get(User, user_id).last_login_at is None


def test_bad_signature_rejected(client, seed):
    seed.user(seed.company(), telegram_user_id=5003)
    init_data = sign_init_data(telegram_fields(5003), bot_token="1:WRONG")
    response = client.post("/api/auth/telegram", json={"init_data": init_data})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid Telegram data"


def test_signed_payload_without_user_is_bad_request(client):
    init_data = sign_init_data({"auth_date": "1700000000"})
    response = client.post("/api/auth/telegram", json={"init_data": init_data})
    assert response.status_code == 400


def test_token_check(client, auth_headers):
    headers = auth_headers("user-1", telegram_user_id=77)
    response = client.get("/api/auth/telegram", headers={"Authorization": headers["Authorization"]})
    assert response.status_code == 200
    assert response.json() == {"valid": True, "user_id": "user-1", "telegram_user_id": 77}


def test_token_check_without_token(client):
    assert client.get("/api/auth/telegram").status_code == 401
    bad = client.get("/api/auth/telegram", headers={"Authorization": "Bearer nope"})
    assert bad.status_code == 401


def test_valid_token_for_deleted_user_is_unauthorized(client, auth_headers):
    response = client.get("/api/tasks", headers=auth_headers("ghost-user"))
    assert response.status_code == 401
    assert response.json()["detail"] == "User not found"


def test_user_without_company_is_forbidden(client, seed, auth_headers):
    homeless = seed.user(None)
    response = client.get("/api/tasks", headers=auth_headers(homeless))
    assert response.status_code == 403
    assert response.json()["detail"] == "User not assigned to any company"
