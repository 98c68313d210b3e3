# =============================================================================
# tests/test_tasks.py - タスクCRUD
# =============================================================================

from contenthub.models.task import Task


def _create(client, headers, **body):
    body.setdefault("title", "Write report")
    res = client.post("/tasks", json=body, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


class TestTasks:
    def test_defaults(self, client, user, user_headers):
        task = _create(client, user_headers)

        assert task["priority"] == "medium"
        assert task["status"] == "pending"
        assert task["creator_id"] == user.id
        assert task["user_email"] == user.email

    def test_blank_enums_fall_back_to_defaults(self, client, user_headers):
        task = _create(client, user_headers, priority="", status="")

        assert task["priority"] == "medium"
        assert task["status"] == "pending"

    def test_invalid_priority_is_400(self, client, user_headers):
        res = client.post("/tasks", json={"title": "x", "priority": "urgent"}, headers=user_headers)
        assert res.status_code == 400

    def test_blank_title_is_400(self, client, user_headers):
        assert client.post("/tasks", json={"title": "   "}, headers=user_headers).status_code == 400

    def test_due_date_alias(self, client, user_headers):
        task = _create(client, user_headers, due_date="2030-01-02T03:04:05Z")
        assert task["deadline"].startswith("2030-01-02T03:04:05")

    def test_list_requires_login(self, client):
        assert client.get("/tasks").status_code == 401

    def test_list_filters(self, client, user_headers):
        _create(client, user_headers, title="a", priority="high")
        _create(client, user_headers, title="b", priority="low", status="completed")

        res = client.get("/tasks", params={"priority": "high"}, headers=user_headers)
        assert [t["title"] for t in res.json()["tasks"]] == ["a"]

        res = client.get("/tasks", params={"status": "completed"}, headers=user_headers)
        assert [t["title"] for t in res.json()["tasks"]] == ["b"]

    def test_get_missing_is_404(self, client, user_headers):
        assert client.get("/tasks/9999", headers=user_headers).status_code == 404

    def test_owner_update(self, client, user_headers):
        task = _create(client, user_headers)

        res = client.put(f"/tasks/{task['id']}", json={"status": "in_progress"}, headers=user_headers)
        assert res.status_code == 200
        assert res.json()["status"] == "in_progress"
        assert res.json()["title"] == "Write report"

    def test_update_invalid_status_is_400(self, client, user_headers):
        task = _create(client, user_headers)

        res = client.put(f"/tasks/{task['id']}", json={"status": "done"}, headers=user_headers)
        assert res.status_code == 400

    def test_empty_update_is_400(self, client, user_headers):
        task = _create(client, user_headers)
        assert client.put(f"/tasks/{task['id']}", json={}, headers=user_headers).status_code == 400

    def test_non_owner_delete_is_403(self, client, user_headers, other_headers):
        task = _create(client, user_headers)
        assert client.delete(f"/tasks/{task['id']}", headers=other_headers).status_code == 403

    def test_delete_is_soft(self, client, user_headers, db):
        task = _create(client, user_headers)

        assert client.delete(f"/tasks/{task['id']}", headers=user_headers).status_code == 200
        assert client.get(f"/tasks/{task['id']}", headers=user_headers).status_code == 404
        assert db.query(Task).filter(Task.id == task["id"]).one().deleted_at is not None

    def test_admin_can_delete_any(self, client, user_headers, admin_headers):
        task = _create(client, user_headers)
        assert client.delete(f"/tasks/{task['id']}", headers=admin_headers).status_code == 200
