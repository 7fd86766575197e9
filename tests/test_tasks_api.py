"""Task endpoints: creation, updates, status, trash and tags."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from taskhub.models import ChecklistItem, Comment, HistoryEntry, Task


@pytest.fixture
def team(seed):
    company = seed.company()
    other = seed.company()
    return {
        "company": company,
        "other": other,
        "director": seed.user(company, role="director", name="Dana"),
        "head": seed.user(company, role="department_head", name="Hal"),
        "alice": seed.user(company, name="Alice"),
        "bob": seed.user(company, name="Bob"),
        "outsider": seed.user(other, name="Olga"),
    }


def _count(sync_engine, model, **criteria) -> int:
    with Session(sync_engine) as session:
        stmt = select(func.count()).select_from(model)
        for column, value in criteria.items():
            stmt = stmt.where(getattr(model, column) == value)
        return session.execute(stmt).scalar_one()


def test_create_task(client, team, auth_headers, seed):
    process = seed.process(team["company"])
    response = client.post(
        "/api/tasks",
        headers=auth_headers(team["alice"]),
        json={
            "title": "Prepare report",
            "assignee_ids": [team["bob"], team["director"]],
            "observer_ids": [team["head"]],
            "process_id": process,
            "tags": ["finance", "q3", "finance"],
            "checklist": ["Collect numbers", "Draft"],
        },
    )
    assert response.status_code == 201
    task = response.json()
    assert task["status"] == "new"
    assert task["creator_id"] == team["alice"]
    assert task["responsible_id"] == team["bob"]
    assert sorted(task["assignee_ids"]) == sorted([team["bob"], team["director"]])
    assert task["observer_ids"] == [team["head"]]
    assert task["tags"] == ["finance", "q3"]
    assert task["process"]["id"] == process

    detail = client.get(f"/api/tasks/{task['id']}", headers=auth_headers(team["alice"])).json()
    assert [item["text"] for item in detail["checklist"]] == ["Collect numbers", "Draft"]
    assert [entry["action_type"] for entry in detail["history"]] == ["created"]


def test_create_task_without_assignees_makes_creator_responsible(client, team, auth_headers):
    response = client.post(
        "/api/tasks", headers=auth_headers(team["alice"]), json={"title": "Solo"}
    )
    assert response.json()["responsible_id"] == team["alice"]


def test_create_task_rejects_foreign_references(client, team, auth_headers, seed):
    headers = auth_headers(team["alice"])
    foreign_assignee = client.post(
        "/api/tasks", headers=headers, json={"title": "x", "assignee_ids": [team["outsider"]]}
    )
    foreign_observer = client.post(
        "/api/tasks", headers=headers, json={"title": "x", "observer_ids": [team["outsider"]]}
    )
    foreign_process = client.post(
        "/api/tasks", headers=headers, json={"title": "x", "process_id": seed.process(team["other"])}
    )
    assert foreign_assignee.status_code == 400
    assert foreign_observer.status_code == 400
    assert foreign_process.status_code == 400


def test_cross_tenant_task_is_not_found(client, team, auth_headers, seed):
    foreign_task = seed.task(team["other"], creator_id=team["outsider"])
    headers = auth_headers(team["director"])
    assert client.get(f"/api/tasks/{foreign_task}", headers=headers).status_code == 404
    assert client.put(
        f"/api/tasks/{foreign_task}", headers=headers, json={"title": "hijack"}
    ).status_code == 404
    assert client.post(f"/api/tasks/{foreign_task}/delete", headers=headers).status_code == 404
    assert client.get(f"/api/tasks/{foreign_task}", headers=auth_headers(team["outsider"])).status_code == 200


def test_list_tasks_is_company_scoped_and_filtered(client, team, auth_headers, seed):
    mine = seed.task(team["company"], creator_id=team["alice"], title="Mine")
    seed.task(team["company"], creator_id=team["bob"], title="Bob's")
    seed.task(team["company"], creator_id=team["alice"], title="Binned", is_deleted=True)
    seed.task(team["other"], creator_id=team["outsider"], title="Foreign")
    headers = auth_headers(team["alice"])

    titles = {t["title"] for t in client.get("/api/tasks", headers=headers).json()}
    assert titles == {"Mine", "Bob's"}

    created = client.get("/api/tasks", headers=headers, params={"created_by": team["alice"]}).json()
    assert [t["id"] for t in created] == [mine]

    with_deleted = client.get("/api/tasks", headers=headers, params={"include_deleted": True}).json()
    assert len(with_deleted) == 3

    foreign_filter = client.get("/api/tasks", headers=headers, params={"assigned_to": team["outsider"]})
    assert foreign_filter.status_code == 400


def test_update_task_records_history(client, team, auth_headers):
    headers = auth_headers(team["alice"])
    task = client.post("/api/tasks", headers=headers, json={"title": "Old"}).json()

    response = client.put(
        f"/api/tasks/{task['id']}",
        headers=headers,
        json={"title": "New", "priority": 1, "assignee_ids": [team["bob"]]},
    )
    assert response.status_code == 200
    updated = response.json()
    assert updated["title"] == "New"
    assert updated["responsible_id"] == team["bob"]

    detail = client.get(f"/api/tasks/{task['id']}", headers=headers).json()
    actions = {entry["action_type"] for entry in detail["history"]}
    assert {"title_changed", "priority_changed", "assignees_changed", "created"} <= actions
    title_entry = next(e for e in detail["history"] if e["action_type"] == "title_changed")
    assert (title_entry["old_value"], title_entry["new_value"]) == ("Old", "New")


def test_resending_same_due_date_records_no_history(client, team, auth_headers, sync_engine):
    headers = auth_headers(team["alice"])
    task = client.post(
        "/api/tasks", headers=headers, json={"title": "Dated", "due_date": "2030-01-15T12:00:00+00:00"}
    ).json()
    url = f"/api/tasks/{task['id']}"

    same_instant = client.put(url, headers=headers, json={"due_date": "2030-01-15T15:00:00+03:00"})
    assert same_instant.status_code == 200
    assert _count(sync_engine, HistoryEntry, task_id=task["id"], action_type="due_date_changed") == 0

    moved = client.put(url, headers=headers, json={"due_date": "2030-01-16T12:00:00Z"})
    assert moved.status_code == 200
    assert _count(sync_engine, HistoryEntry, task_id=task["id"], action_type="due_date_changed") == 1


def test_status_change_manages_completed_at(client, team, auth_headers, sync_engine):
    headers = auth_headers(team["alice"])
    task = client.post("/api/tasks", headers=headers, json={"title": "Ship"}).json()

    done = client.put(
        f"/api/tasks/{task['id']}/status",
        headers=headers,
        json={"status": "completed", "result": "Shipped", "actual_hours": 2.5},
    ).json()
    assert done["status"] == "completed"
    assert done["completed_at"] is not None
    assert done["result"] == "Shipped"

    reopened = client.put(
        f"/api/tasks/{task['id']}/status", headers=headers, json={"status": "in_progress"}
    ).json()
    assert reopened["completed_at"] is None
    assert _count(sync_engine, HistoryEntry, task_id=task["id"], action_type="status_changed") == 2


def test_soft_delete_twice_conflicts_and_keeps_timestamp(client, team, auth_headers, seed):
    task_id = seed.task(team["company"], creator_id=team["alice"])
    headers = auth_headers(team["alice"])

    first = client.post(f"/api/tasks/{task_id}/delete", headers=headers)
    assert first.status_code == 200
    assert first.json()["is_deleted"] is True
    deleted_at = seed.get(Task, task_id).deleted_at
    assert deleted_at is not None

    second = client.post(f"/api/tasks/{task_id}/delete", headers=headers)
    assert second.status_code == 409
    assert seed.get(Task, task_id).deleted_at == deleted_at


def test_restore_live_task_conflicts(client, team, auth_headers, seed):
    task_id = seed.task(team["company"], creator_id=team["alice"])
    response = client.put(f"/api/tasks/{task_id}/delete", headers=auth_headers(team["alice"]))
    assert response.status_code == 409


def test_restore_from_trash(client, team, auth_headers, seed):
    task_id = seed.task(team["company"], creator_id=team["alice"])
    headers = auth_headers(team["director"])
    client.post(f"/api/tasks/{task_id}/delete", headers=headers)
    restored = client.put(f"/api/tasks/{task_id}/delete", headers=headers)
    assert restored.status_code == 200
    assert restored.json()["is_deleted"] is False
    assert restored.json()["deleted_at"] is None


def test_trash_requires_manager_or_creator(client, team, auth_headers, seed):
    task_id = seed.task(team["company"], creator_id=team["alice"])
    assert client.post(
        f"/api/tasks/{task_id}/delete", headers=auth_headers(team["bob"])
    ).status_code == 403
    assert client.post(
        f"/api/tasks/{task_id}/delete", headers=auth_headers(team["head"])
    ).status_code == 200
    assert seed.get(Task, task_id).deleted_by == team["head"]


def test_trashed_task_is_read_only(client, team, auth_headers, seed):
    task_id = seed.task(team["company"], creator_id=team["alice"], is_deleted=True)
    headers = auth_headers(team["alice"])
    assert client.put(f"/api/tasks/{task_id}", headers=headers, json={"title": "x"}).status_code == 403
    assert client.put(
        f"/api/tasks/{task_id}/status", headers=headers, json={"status": "completed"}
    ).status_code == 403
    assert client.get(f"/api/tasks/{task_id}", headers=headers).status_code == 200


def test_permanent_delete_only_from_trash(client, team, auth_headers, seed, sync_engine):
    headers = auth_headers(team["director"])
    task = client.post(
        "/api/tasks",
        headers=headers,
        json={"title": "Doomed", "assignee_ids": [team["bob"]], "checklist": ["a"]},
    ).json()
    client.post(f"/api/tasks/{task['id']}/comments", headers=headers, json={"text": "bye"})

    assert client.delete(f"/api/tasks/{task['id']}/delete", headers=headers).status_code == 409

    client.post(f"/api/tasks/{task['id']}/delete", headers=headers)
    response = client.delete(f"/api/tasks/{task['id']}/delete", headers=headers)
    assert response.status_code == 204
    assert seed.get(Task, task["id"]) is None
    assert _count(sync_engine, Comment, task_id=task["id"]) == 0
    assert _count(sync_engine, ChecklistItem, task_id=task["id"]) == 0
    assert _count(sync_engine, HistoryEntry, task_id=task["id"]) == 0
    assert client.get(f"/api/tasks/{task['id']}", headers=headers).status_code == 404


def test_tags(client, team, auth_headers, seed):
    seed.task(team["company"], tags=["alpha", "beta"])
    seed.task(team["company"], tags=["beta"])
    seed.task(team["company"], tags=["gamma"], is_deleted=True)
    seed.task(team["other"], tags=["foreign"])
    headers = auth_headers(team["alice"])

    plain = client.get("/api/tags", headers=headers).json()
    assert [t["name"] for t in plain["data"]] == ["alpha", "beta"]
    assert plain["total"] == 2

    counted = client.get("/api/tags", headers=headers, params={"include_count": True}).json()
    assert counted["data"] == [{"name": "beta", "count": 2}, {"name": "alpha", "count": 1}]

    searched = client.get("/api/tags", headers=headers, params={"search": "AL"}).json()
    assert [t["name"] for t in searched["data"]] == ["alpha"]
