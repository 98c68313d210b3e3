# =============================================================================
# tests/test_blogs.py - ブログCRUD・公開範囲・いいね
# =============================================================================

from contenthub.models.blog import Blog


def _create(client, headers, **overrides):
    body = {"title": "Hello", "content": "world", "status": "published"}
    body.update(overrides)
    body = {k: v for k, v in body.items() if v is not None}
    res = client.post("/blog", json=body, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


class TestBlogCrud:
    def test_create_takes_owner_from_token(self, client, user, user_headers):
        blog = _create(client, user_headers)

        assert blog["user_id"] == user.id
        assert blog["user_email"] == user.email
        assert blog["likes"] == 0

    def test_create_requires_login(self, client):
        assert client.post("/blog", json={"title": "t", "content": "c"}).status_code == 401

    def test_create_missing_title_is_400(self, client, user_headers):
        assert client.post("/blog", json={"content": "c"}, headers=user_headers).status_code == 400

    def test_default_status_is_draft(self, client, user_headers):
        blog = _create(client, user_headers, status=None)
        assert blog["status"] == "draft"

    def test_owner_can_update(self, client, user_headers):
        blog = _create(client, user_headers)

        res = client.put(f"/blog/{blog['id']}", json={"title": "New"}, headers=user_headers)
        assert res.status_code == 200
        assert res.json()["title"] == "New"
        assert res.json()["content"] == "world"

    def test_empty_update_is_400(self, client, user_headers):
        blog = _create(client, user_headers)
        assert client.put(f"/blog/{blog['id']}", json={}, headers=user_headers).status_code == 400

    def test_non_owner_update_is_403(self, client, user_headers, other_headers):
        blog = _create(client, user_headers)

        res = client.put(f"/blog/{blog['id']}", json={"title": "x"}, headers=other_headers)
        assert res.status_code == 403

    def test_admin_bypasses_owner_check(self, client, user_headers, admin_headers):
        blog = _create(client, user_headers)

        res = client.put(f"/blog/{blog['id']}", json={"title": "by admin"}, headers=admin_headers)
        assert res.status_code == 200

    def test_delete_is_soft(self, client, user_headers, db):
        blog = _create(client, user_headers)

        assert client.delete(f"/blog/{blog['id']}", headers=user_headers).status_code == 200
        assert client.get(f"/blog/{blog['id']}").status_code == 404
        row = db.query(Blog).filter(Blog.id == blog["id"]).first()
        assert row is not None and row.deleted_at is not None

    def test_missing_blog_owner_check_is_404(self, client, user_headers):
        assert client.delete("/blog/9999", headers=user_headers).status_code == 404

    def test_non_integer_id_is_400(self, client, user_headers):
        assert client.put("/blog/abc", json={"title": "x"}, headers=user_headers).status_code == 400


class TestVisibility:
    """下書きは作成者・管理者にのみ見える"""

    def test_anonymous_sees_published_only(self, client, user_headers):
        _create(client, user_headers, title="pub")
        _create(client, user_headers, title="draft", status="draft")

        res = client.get("/blog")
        assert res.status_code == 200
        assert [b["title"] for b in res.json()["blogs"]] == ["pub"]
        assert res.json()["total"] == 1

    def test_owner_sees_own_drafts(self, client, user_headers, other_headers):
        _create(client, user_headers, title="mine", status="draft")
        _create(client, other_headers, title="theirs", status="draft")

        titles = [b["title"] for b in client.get("/blog", headers=user_headers).json()["blogs"]]
        assert titles == ["mine"]

    def test_draft_detail_hidden_from_others(self, client, user_headers, other_headers, admin_headers):
        blog = _create(client, user_headers, status="draft")

        assert client.get(f"/blog/{blog['id']}").status_code == 404
        assert client.get(f"/blog/{blog['id']}", headers=other_headers).status_code == 404
        assert client.get(f"/blog/{blog['id']}", headers=user_headers).status_code == 200
        assert client.get(f"/blog/{blog['id']}", headers=admin_headers).status_code == 200

    def test_pagination_and_keyword(self, client, user_headers):
        for i in range(5):
            _create(client, user_headers, title=f"post {i}")
        _create(client, user_headers, title="100% match")

        res = client.get("/blog", params={"page": 2, "page_size": 2})
        body = res.json()
        assert body["pagination"] == {"current_page": 2, "page_size": 2, "total_pages": 3, "total_count": 6}
        assert len(body["blogs"]) == 2

        res = client.get("/blog", params={"keyword": "%"})
        assert [b["title"] for b in res.json()["blogs"]] == ["100% match"]

    def test_page_size_out_of_range_is_400(self, client):
        assert client.get("/blog", params={"page_size": 101}).status_code == 400


class TestLikes:
    def test_like_and_dislike(self, client, user_headers, other_headers):
        blog = _create(client, user_headers)

        assert client.post(f"/blog/{blog['id']}/like", headers=other_headers).json()["total_likes"] == 1
        assert client.post(f"/blog/{blog['id']}/like", headers=user_headers).json()["total_likes"] == 2
        assert client.post(f"/blog/{blog['id']}/dislike", headers=user_headers).json()["total_likes"] == 1

    def test_dislike_never_below_zero(self, client, user_headers):
        blog = _create(client, user_headers)

        res = client.post(f"/blog/{blog['id']}/dislike", headers=user_headers)
        assert res.status_code == 200
        assert res.json()["total_likes"] == 0

    def test_like_requires_login(self, client, user_headers):
        blog = _create(client, user_headers)
        assert client.post(f"/blog/{blog['id']}/like").status_code == 401

    def test_like_missing_blog_is_404(self, client, user_headers):
        assert client.post("/blog/9999/like", headers=user_headers).status_code == 404

    def test_others_draft_cannot_be_liked(self, client, db, user_headers, other_headers):
        blog = _create(client, user_headers, status="draft")

        assert client.post(f"/blog/{blog['id']}/like", headers=other_headers).status_code == 404
        assert client.post(f"/blog/{blog['id']}/dislike", headers=other_headers).status_code == 404
        assert db.query(Blog.likes).filter(Blog.id == blog["id"]).scalar() == 0

    def test_owner_and_admin_can_like_draft(self, client, user_headers, admin_headers):
        blog = _create(client, user_headers, status="draft")

        assert client.post(f"/blog/{blog['id']}/like", headers=user_headers).json()["total_likes"] == 1
        assert client.post(f"/blog/{blog['id']}/like", headers=admin_headers).json()["total_likes"] == 2
