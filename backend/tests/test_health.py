from contenthub.create_admin import promote_or_create_admin
from contenthub.models.user import User


def test_health(client):
    res = client.get("/health")

    assert res.status_code == 200
    assert res.json() == {"status": "ok", "db": "connected", "redis": "connected"}


def test_create_admin_promotes_existing_user(db, user):
    email, created = promote_or_create_admin(db, user.email)

    assert email == user.email
    assert created is False
    assert db.query(User).filter(User.id == user.id).one().role == "admin"


def test_create_admin_creates_new_user(db):
    email, created = promote_or_create_admin(db, "Root@Example.com")

    assert created is True
    assert db.query(User).filter(User.email == "root@example.com").one().role == "admin"
