# =============================================================================
# tests/test_users.py - ユーザーAPI (本人・管理者)
# =============================================================================

from contenthub.models.user import User


class TestSelf:
    def test_me(self, client, user, user_headers):
        res = client.get("/user/me", headers=user_headers)

        assert res.status_code == 200
        assert res.json()["email"] == user.email

    def test_change_own_email(self, client, user, user_headers):
        res = client.put("/user/self", json={"email": "Alice2@Example.com"}, headers=user_headers)

        assert res.status_code == 200
        assert res.json()["email"] == "alice2@example.com"

    def test_change_to_taken_email_is_400(self, client, other_user, user_headers):
        res = client.put("/user/self", json={"email": other_user.email}, headers=user_headers)
        assert res.status_code == 400

    def test_my_tasks(self, client, user_headers, other_headers):
        client.post("/tasks", json={"title": "mine"}, headers=user_headers)
        client.post("/tasks", json={"title": "theirs"}, headers=other_headers)

        res = client.get("/user/me/tasks", headers=user_headers)
        assert res.status_code == 200
        assert [t["title"] for t in res.json()["tasks"]] == ["mine"]

    def test_user_can_view_self_but_not_others(self, client, user, other_user, user_headers):
        assert client.get(f"/user/{user.id}", headers=user_headers).status_code == 200
        assert client.get(f"/user/{other_user.id}", headers=user_headers).status_code == 403


class TestAdmin:
    """管理者によるユーザー管理"""

    def test_list_users(self, client, user, other_user, admin, admin_headers):
        res = client.get("/user/", headers=admin_headers)

        assert res.status_code == 200
        assert res.json()["total"] == 3

    def test_list_users_search_and_role(self, client, user, other_user, admin, admin_headers):
        res = client.get("/user/", params={"search": "bob"}, headers=admin_headers)
        assert [u["email"] for u in res.json()["users"]] == ["bob@example.com"]

        res = client.get("/user/", params={"role": "admin"}, headers=admin_headers)
        assert [u["email"] for u in res.json()["users"]] == ["admin@example.com"]

    def test_list_users_requires_admin(self, client, user_headers):
        assert client.get("/user/", headers=user_headers).status_code == 403

    def test_get_missing_user_is_404(self, client, admin_headers):
        assert client.get("/user/9999", headers=admin_headers).status_code == 404

    def test_update_role(self, client, user, admin_headers):
        res = client.put(f"/user/{user.id}", json={"role": "admin"}, headers=admin_headers)

        assert res.status_code == 200
        assert res.json()["role"] == "admin"

    def test_update_with_empty_body_is_400(self, client, user, admin_headers):
        assert client.put(f"/user/{user.id}", json={}, headers=admin_headers).status_code == 400

    def test_update_invalid_role_is_400(self, client, user, admin_headers):
        res = client.put(f"/user/{user.id}", json={"role": "root"}, headers=admin_headers)
        assert res.status_code == 400

    def test_delete_is_soft(self, client, user, admin_headers, db):
        res = client.delete(f"/user/{user.id}", headers=admin_headers)
        assert res.status_code == 200

        db.expire_all()
        row = db.query(User).filter(User.id == user.id).first()
        assert row is not None
        assert row.deleted_at is not None
        assert client.get(f"/user/{user.id}", headers=admin_headers).status_code == 404

    def test_admin_cannot_delete_self(self, client, admin, admin_headers):
        assert client.delete(f"/user/{admin.id}", headers=admin_headers).status_code == 400

    def test_non_integer_id_is_400(self, client, admin_headers):
        assert client.get("/user/abc", headers=admin_headers).status_code == 400
