# test_task_isolation.py
from taskmanager_app import models


def _headers(token):
    return {"Authorization": f"Bearer {token}"}


def test_list_never_returns_other_owners_tasks(client, signup, api_create):
    alice_token, alice = signup(name="Alice")
    bob_token, bob = signup(name="Bob")

    for i in range(3):
        api_create(f"alice {i}", headers=_headers(alice_token))
    for i in range(2):
        api_create(f"bob {i}", headers=_headers(bob_token))

    alice_tasks = client.get("/api/tasks", headers=_headers(alice_token)).json()["tasks"]
    bob_tasks = client.get("/api/tasks", headers=_headers(bob_token)).json()["tasks"]

    assert len(alice_tasks) == 3
    assert len(bob_tasks) == 2
    assert {t["owner_id"] for t in alice_tasks} == {alice["id"]}
    assert {t["owner_id"] for t in bob_tasks} == {bob["id"]}

    # search and filters stay inside the caller's tasks too
    found = client.get("/api/tasks?search=bob", headers=_headers(alice_token)).json()["tasks"]
    assert found == []


def test_foreign_task_update_is_not_found_and_untouched(client, signup, api_create, db):
    owner_token, owner = signup()
    intruder_token, _ = signup()
    t = api_create("private", "secret plans", headers=_headers(owner_token))

    r = client.put(
        f"/api/tasks/{t['id']}",
        json={"title": "hijacked", "status": "completed"},
        headers=_headers(intruder_token),
    )
    assert r.status_code == 404
    assert r.json() == {"message": "Task not found"}

    # same answer as for an id that does not exist at all
    missing = client.put("/api/tasks/99999", json={"title": "x"}, headers=_headers(intruder_token))
    assert missing.status_code == r.status_code
    assert missing.json() == r.json()

    stored = db.get(models.Task, t["id"])
    assert stored.title == "private"
    assert stored.status == "pending"
    assert stored.owner_id == owner["id"]


def test_foreign_task_delete_is_not_found_and_untouched(client, signup, api_create, db):
    owner_token, _ = signup()
    intruder_token, _ = signup()
    t = api_create("keep me", headers=_headers(owner_token))

    r = client.delete(f"/api/tasks/{t['id']}", headers=_headers(intruder_token))
    assert r.status_code == 404
    assert r.json() == {"message": "Task not found"}
    assert db.get(models.Task, t["id"]) is not None

    # repeated attempts never change the outcome
    assert client.delete(f"/api/tasks/{t['id']}", headers=_headers(intruder_token)).status_code == 404
    assert len(client.get("/api/tasks", headers=_headers(owner_token)).json()["tasks"]) == 1


def test_owner_is_immutable_under_update(client, signup, api_create):
    token, user = signup()
    _, other = signup()
    t = api_create("mine", headers=_headers(token))

    r = client.put(
        f"/api/tasks/{t['id']}",
        json={"title": "still mine", "owner_id": other["id"]},
        headers=_headers(token),
    )
    assert r.status_code == 200
    assert r.json()["task"]["owner_id"] == user["id"]
