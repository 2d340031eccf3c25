from tests.conftest import create_task


def test_admin_assigns_task_to_another_user(client, admin, alice, todo_status):
    task = create_task(client, admin, todo_status["id"], assignee=alice.id)

    assert task["assignee"]["id"] == alice.id
    assert task["status"] == {"id": todo_status["id"], "name": "To Do"}
    assert task["priority"] == "medium"


def test_non_admin_assignee_is_forced_to_self(client, alice, bob, todo_status):
    task = create_task(client, alice, todo_status["id"], assignee=bob.id)

    assert task["assignee"]["id"] == alice.id


def test_admin_without_assignee_takes_the_task(client, admin, todo_status):
    task = create_task(client, admin, todo_status["id"])

    assert task["assignee"]["id"] == admin.id


def test_create_with_unknown_status_is_not_found(client, alice):
    resp = client.post(
        "/task/create", json={"title": "x", "status": "a" * 24}, headers=alice.headers
    )

    assert resp.status_code == 404
    assert resp.json()["message"] == "Invalid status"


def test_create_with_deleted_status_is_not_found(client, admin, alice, todo_status):
    client.request("DELETE", "/status/delete", json={"id": todo_status["id"]}, headers=admin.headers)

    resp = client.post(
        "/task/create", json={"title": "x", "status": todo_status["id"]}, headers=alice.headers
    )

    assert resp.status_code == 404


def test_admin_with_unknown_assignee_is_not_found(client, admin, todo_status):
    resp = client.post(
        "/task/create",
        json={"title": "x", "status": todo_status["id"], "assignee": "b" * 24},
        headers=admin.headers,
    )

    assert resp.status_code == 404
    assert resp.json()["message"] == "Invalid assignee"


def test_create_validates_input(client, alice, todo_status):
    resp = client.post(
        "/task/create",
        json={"title": "x", "status": todo_status["id"], "priority": "urgent"},
        headers=alice.headers,
    )
    assert resp.status_code == 400

    resp = client.post("/task/create", json={"status": todo_status["id"]}, headers=alice.headers)
    assert resp.status_code == 400
    assert resp.json()["message"].startswith("Title")


def test_non_admin_lists_only_own_tasks(client, admin, alice, bob, todo_status):
    create_task(client, alice, todo_status["id"], title="alice 1")
    create_task(client, alice, todo_status["id"], title="alice 2")
    create_task(client, bob, todo_status["id"], title="bob 1")
    create_task(client, admin, todo_status["id"], title="for bob", assignee=bob.id)

    alice_tasks = client.get("/task/getall", headers=alice.headers).json()["data"]
    bob_tasks = client.get("/task/getall", headers=bob.headers).json()["data"]
    admin_tasks = client.get("/task/getall", headers=admin.headers).json()["data"]

    assert {t["assignee"]["id"] for t in alice_tasks} == {alice.id}
    assert len(alice_tasks) == 2
    assert {t["title"] for t in bob_tasks} == {"bob 1", "for bob"}
    assert len(admin_tasks) == 4


def test_read_single_task(client, alice, bob, admin, todo_status):
    task = create_task(client, alice, todo_status["id"])

    assert client.get(f"/task/get/{task['id']}", headers=alice.headers).status_code == 200
    assert client.get(f"/task/get/{task['id']}", headers=admin.headers).status_code == 200

    resp = client.get(f"/task/get/{task['id']}", headers=bob.headers)
    assert resp.status_code == 403
    assert resp.json()["message"] == "Not authorized to view this task"


def test_owner_updates_fields_but_not_assignee(client, alice, bob, todo_status):
    task = create_task(client, alice, todo_status["id"], description="draft")

    resp = client.put(
        "/task/update",
        json={"id": task["id"], "title": "Final report", "priority": "high", "assignee": bob.id},
        headers=alice.headers,
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["title"] == "Final report"
    assert data["priority"] == "high"
    assert data["description"] == "draft"
    assert data["assignee"]["id"] == alice.id


def test_admin_reassigns_task(client, admin, alice, bob, todo_status):
    task = create_task(client, alice, todo_status["id"])

    resp = client.put(
        "/task/update", json={"id": task["id"], "assignee": bob.id}, headers=admin.headers
    )

    assert resp.status_code == 200
    assert resp.json()["data"]["assignee"]["id"] == bob.id
    assert client.get(f"/task/get/{task['id']}", headers=alice.headers).status_code == 403


def test_update_with_unknown_status_is_not_found(client, alice, todo_status):
    task = create_task(client, alice, todo_status["id"])

    resp = client.put(
        "/task/update", json={"id": task["id"], "status": "c" * 24}, headers=alice.headers
    )

    assert resp.status_code == 404


def test_non_owner_mutations_are_forbidden_and_leave_task_unchanged(
    client, alice, bob, todo_status, done_status
):
    task = create_task(client, alice, todo_status["id"], title="mine")

    update = client.put("/task/update", json={"id": task["id"], "title": "stolen"}, headers=bob.headers)
    move = client.put("/task/move", json={"id": task["id"], "status": done_status["id"]}, headers=bob.headers)
    delete = client.request("DELETE", "/task/delete", json={"id": task["id"]}, headers=bob.headers)

    assert [update.status_code, move.status_code, delete.status_code] == [403, 403, 403]

    current = client.get(f"/task/get/{task['id']}", headers=alice.headers).json()["data"]
    assert current["title"] == "mine"
    assert current["status"]["id"] == todo_status["id"]


def test_owner_moves_task_to_any_status(client, alice, todo_status, done_status):
    task = create_task(client, alice, todo_status["id"])

    resp = client.put("/task/move", json={"id": task["id"], "status": done_status["id"]}, headers=alice.headers)

    assert resp.status_code == 200
    assert resp.json()["message"] == "Task moved successfully"
    assert resp.json()["data"]["status"] == {"id": done_status["id"], "name": "Done"}


def test_admin_moves_any_task(client, admin, alice, todo_status, done_status):
    task = create_task(client, alice, todo_status["id"])

    resp = client.put("/task/move", json={"id": task["id"], "status": done_status["id"]}, headers=admin.headers)

    assert resp.status_code == 200


def test_move_to_unknown_status_is_not_found(client, alice, todo_status):
    task = create_task(client, alice, todo_status["id"])

    resp = client.put("/task/move", json={"id": task["id"], "status": "d" * 24}, headers=alice.headers)

    assert resp.status_code == 404
    assert resp.json()["message"] == "Invalid status"


def test_delete_twice(client, alice, todo_status):
    task = create_task(client, alice, todo_status["id"])

    first = client.request("DELETE", "/task/delete", json={"id": task["id"]}, headers=alice.headers)
    second = client.request("DELETE", "/task/delete", json={"id": task["id"]}, headers=alice.headers)

    assert first.status_code == 200
    assert second.status_code == 404
    assert client.get(f"/task/get/{task['id']}", headers=alice.headers).status_code == 404
    assert client.get("/task/getall", headers=alice.headers).json()["data"] == []


def test_admin_deletes_any_task(client, admin, alice, todo_status):
    task = create_task(client, alice, todo_status["id"])

    resp = client.request("DELETE", "/task/delete", json={"id": task["id"]}, headers=admin.headers)

    assert resp.status_code == 200


def test_public_board_lists_everything_without_token(client, alice, bob, todo_status):
    create_task(client, alice, todo_status["id"])
    create_task(client, bob, todo_status["id"])

    resp = client.get("/task/get")

    assert resp.status_code == 200
    assert len(resp.json()["data"]) == 2


def test_private_board_requires_token_and_scopes(app, client, alice, bob, todo_status):
    from dataclasses import replace

    create_task(client, alice, todo_status["id"])
    create_task(client, bob, todo_status["id"])
    app.state.settings = replace(app.state.settings, public_board=False)

    assert client.get("/task/get").status_code == 401
    resp = client.get("/task/get", headers=alice.headers)
    assert resp.status_code == 200
    assert [t["assignee"]["id"] for t in resp.json()["data"]] == [alice.id]
