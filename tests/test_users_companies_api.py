"""User and company endpoints."""

import pytest

from taskhub.models import Company, User


@pytest.fixture
def org(seed):
    company = seed.company(plan="pro")
    other = seed.company()
    return {
        "company": company,
        "other": other,
        "director": seed.user(company, role="director", name="Dana"),
        "alice": seed.user(company, name="Alice"),
        "bob": seed.user(company, name="Bob", is_active=False),
        "outsider": seed.user(other, name="Olga"),
        "admin": seed.user(None, role="admin", name="Root"),
    }


def test_list_users_ordered_and_scoped(client, org, auth_headers):
    headers = auth_headers(org["alice"])
    names = [u["name"] for u in client.get("/api/users", headers=headers).json()]
    assert names == ["Alice", "Bob", "Dana"]

    active = client.get("/api/users", headers=headers, params={"active": True}).json()
    assert [u["name"] for u in active] == ["Alice", "Dana"]


def test_get_user_of_other_company_is_not_found(client, org, auth_headers):
    headers = auth_headers(org["alice"])
    assert client.get(f"/api/users/{org['director']}", headers=headers).status_code == 200
    assert client.get(f"/api/users/{org['outsider']}", headers=headers).status_code == 404


def test_director_creates_user(client, org, auth_headers, seed):
    response = client.post(
        "/api/users",
        headers=auth_headers(org["director"]),
        json={"name": "Newbie", "role": "department_head", "telegram_user_id": 424242},
    )
    assert response.status_code == 201
    created = response.json()
    assert created["company_id"] == org["company"]
    assert created["role"] == "department_head"
    assert created["id"] in seed.get(Company, org["company"]).employee_user_ids


def test_duplicate_telegram_id_conflicts(client, org, auth_headers):
    headers = auth_headers(org["director"])
    body = {"name": "Twin", "telegram_user_id": 515151}
    assert client.post("/api/users", headers=headers, json=body).status_code == 201
    assert client.post("/api/users", headers=headers, json=body).status_code == 409


def test_employee_cannot_create_user(client, org, auth_headers):
    response = client.post("/api/users", headers=auth_headers(org["alice"]), json={"name": "X"})
    assert response.status_code == 403


def test_self_service_update(client, org, auth_headers, seed):
    headers = auth_headers(org["alice"])
    response = client.put(
        f"/api/users/{org['alice']}",
        headers=headers,
        json={"position": "Analyst", "notification_settings": {"telegram": False}},
    )
    assert response.status_code == 200
    assert response.json()["position"] == "Analyst"
    assert seed.get(User, org["alice"]).notification_settings == {"telegram": False}


def test_self_service_cannot_escalate(client, org, auth_headers, seed):
    headers = auth_headers(org["alice"])
    response = client.put(f"/api/users/{org['alice']}", headers=headers, json={"role": "director"})
    assert response.status_code == 403
    assert seed.get(User, org["alice"]).role == "employee"


def test_employee_cannot_edit_colleague(client, org, auth_headers):
    response = client.put(
        f"/api/users/{org['director']}", headers=auth_headers(org["alice"]), json={"name": "Evil"}
    )
    assert response.status_code == 403


def test_director_can_deactivate(client, org, auth_headers, seed):
    response = client.put(
        f"/api/users/{org['alice']}",
        headers=auth_headers(org["director"]),
        json={"is_active": False, "role": "department_head"},
    )
    assert response.status_code == 200
    user = seed.get(User, org["alice"])
    assert (user.is_active, user.role) == (False, "department_head")


def test_director_cannot_edit_other_company(client, org, auth_headers):
    response = client.put(
        f"/api/users/{org['outsider']}", headers=auth_headers(org["director"]), json={"name": "X"}
    )
    assert response.status_code == 404


def test_current_company(client, org, auth_headers, seed):
    response = client.get("/api/companies/current", headers=auth_headers(org["alice"]))
    assert response.status_code == 200
    company = response.json()
    assert company["id"] == org["company"]
    assert company["plan"] == "pro"
    assert company["director"]["id"] == org["director"]
    assert {e["id"] for e in company["employees"]} == {org["director"], org["alice"], org["bob"]}


def test_company_listing_is_admin_only(client, org, auth_headers):
    assert client.get("/api/companies", headers=auth_headers(org["director"])).status_code == 403
    listed = client.get("/api/companies", headers=auth_headers(org["admin"]))
    assert listed.status_code == 200
    assert {c["id"] for c in listed.json()} == {org["company"], org["other"]}


def test_admin_creates_company_and_attaches_users(client, org, auth_headers, seed):
    recruit = seed.user(None, name="Recruit")
    boss = seed.user(None, role="director", name="Boss")
    response = client.post(
        "/api/companies",
        headers=auth_headers(org["admin"]),
        json={"director_app_user_id": boss, "employee_user_ids": [recruit]},
    )
    assert response.status_code == 201
    company_id = response.json()["id"]
    assert seed.get(User, recruit).company_id == company_id
    assert seed.get(User, boss).company_id == company_id

    missing = client.post(
        "/api/companies",
        headers=auth_headers(org["admin"]),
        json={"employee_user_ids": ["nope"]},
    )
    assert missing.status_code == 400


def test_director_cannot_grant_admin_role(client, org, auth_headers, seed):
    headers = auth_headers(org["director"])
    promote_self = client.put(f"/api/users/{org['director']}", headers=headers, json={"role": "admin"})
    promote_colleague = client.put(f"/api/users/{org['alice']}", headers=headers, json={"role": "admin"})
    create_admin = client.post("/api/users", headers=headers, json={"name": "Root2", "role": "admin"})

    assert promote_self.status_code == 403
    assert promote_colleague.status_code == 403
    assert create_admin.status_code == 403
    assert seed.get(User, org["director"]).role == "director"
    assert seed.get(User, org["alice"]).role == "employee"
    assert client.get("/api/companies", headers=headers).status_code == 403


def test_director_can_still_change_tenant_roles(client, org, auth_headers, seed):
    response = client.put(
        f"/api/users/{org['alice']}",
        headers=auth_headers(org["director"]),
        json={"role": "department_head"},
    )
    assert response.status_code == 200
    assert seed.get(User, org["alice"]).role == "department_head"


def test_company_creation_cannot_take_users_of_another_company(client, org, auth_headers, seed):
    recruit = seed.user(None, name="Recruit")
    response = client.post(
        "/api/companies",
        headers=auth_headers(org["admin"]),
        json={"director_app_user_id": recruit, "employee_user_ids": [org["outsider"]]},
    )
    assert response.status_code == 400
    assert seed.get(User, org["outsider"]).company_id == org["other"]
    assert seed.get(User, recruit).company_id is None
