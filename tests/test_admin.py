import pytest

from app.auth import hash_password, verify_password
from app.create_admin import ensure_admin
from app.models import Playlist, User, VideoPlaylist


@pytest.fixture()
def admin(make_user):
    _, headers = make_user(is_admin=True, email="admin@example.com")
    return headers


# ---------- Auth ----------


def test_login_and_me(client, db):
    db.add(User(email="viewer@example.com", password_hash=hash_password("s3cret!")))
    db.commit()

    resp = client.post("/api/auth/login", json={"email": "Viewer@Example.com ", "password": "s3cret!"})
    assert resp.status_code == 200
    token = resp.json()["access_token"]
    assert resp.json()["token_type"] == "bearer"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "viewer@example.com"
    assert me.json()["is_admin"] is False
    assert me.json()["last_login"] is not None


def test_login_wrong_password(client, db):
    db.add(User(email="viewer@example.com", password_hash=hash_password("s3cret!")))
    db.commit()
    resp = client.post("/api/auth/login", json={"email": "viewer@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid email or password"
    assert client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "x"}).status_code == 401


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer junk"}).status_code == 401


def test_ensure_admin_creates_then_promotes(db):
    user, created = ensure_admin(db, " Boss@Example.com", "first-pass")
    assert created is True
    assert user.email == "boss@example.com"
    assert user.is_admin is True

    user.is_admin = False
    db.commit()
    again, created = ensure_admin(db, "boss@example.com", "second-pass")
    assert created is False
    assert again.is_admin is True
    assert verify_password("first-pass", again.password_hash)

    again, _ = ensure_admin(db, "boss@example.com", "second-pass", reset_password=True)
    assert verify_password("second-pass", again.password_hash)


# ---------- Categories ----------


def test_admin_routes_require_admin(client, make_user):
    _, user = make_user()
    assert client.get("/api/admin/categories").status_code == 401
    assert client.get("/api/admin/categories", headers=user).status_code == 403
    assert client.post("/api/admin/playlists", json={"name": "x"}, headers=user).status_code == 403
    assert client.get("/api/admin/analytics", headers=user).status_code == 403


def test_category_crud(client, admin):
    resp = client.post("/api/admin/categories", json={"name": "  Music "}, headers=admin)
    assert resp.status_code == 201
    cat = resp.json()
    assert cat["name"] == "Music"

    renamed = client.put(f"/api/admin/categories/{cat['id']}", json={"name": "Worship"}, headers=admin)
    assert renamed.json()["name"] == "Worship"
    assert [c["name"] for c in client.get("/api/categories").json()] == ["Worship"]

    assert client.delete(f"/api/admin/categories/{cat['id']}", headers=admin).status_code == 200
    assert client.get("/api/admin/categories", headers=admin).json() == []
    assert client.delete(f"/api/admin/categories/{cat['id']}", headers=admin).status_code == 404


def test_category_blank_name(client, admin):
    assert client.post("/api/admin/categories", json={"name": "   "}, headers=admin).status_code == 400


def test_duplicate_category_conflicts(client, admin, make_category):
    make_category("Music")
    other = make_category("News")
    resp = client.post("/api/admin/categories", json={"name": "Music"}, headers=admin)
    assert resp.status_code == 409
    assert client.put(f"/api/admin/categories/{other.id}", json={"name": "Music"}, headers=admin).status_code == 409


def test_category_in_use_cannot_be_deleted(client, admin, make_category, make_video):
    cat = make_category("Music")
    make_video(category_id=cat.id)
    resp = client.delete(f"/api/admin/categories/{cat.id}", headers=admin)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Category in use"


# ---------- Playlists ----------


def test_playlist_lifecycle(client, db, admin, make_video):
    first, second = make_video(), make_video()
    playlist = client.post("/api/admin/playlists", json={"name": "Sunday"}, headers=admin).json()
    assert playlist["creator"] == "admin@example.com"
    assert playlist["video_count"] == 0
    pid = playlist["id"]

    added = client.post(f"/api/admin/playlists/{pid}/videos", json={"video_id": first.id}, headers=admin)
    assert added.status_code == 201
    assert added.json()["position"] == 1
    added = client.post(f"/api/admin/playlists/{pid}/videos", json={"video_id": second.id}, headers=admin)
    assert added.json()["position"] == 2

    dup = client.post(f"/api/admin/playlists/{pid}/videos", json={"video_id": first.id}, headers=admin)
    assert dup.status_code == 409
    missing = client.post(f"/api/admin/playlists/{pid}/videos", json={"video_id": 999}, headers=admin)
    assert missing.status_code == 404

    listed = client.get("/api/admin/playlists", headers=admin).json()
    assert [(p["name"], p["video_count"]) for p in listed] == [("Sunday", 2)]

    renamed = client.put(f"/api/admin/playlists/{pid}", json={"name": "Sunday Service"}, headers=admin)
    assert renamed.json()["name"] == "Sunday Service"
    assert renamed.json()["video_count"] == 2

    assert client.delete(f"/api/admin/playlists/{pid}/videos/{first.id}", headers=admin).status_code == 200
    assert client.delete(f"/api/admin/playlists/{pid}/videos/{first.id}", headers=admin).status_code == 404

    assert client.delete(f"/api/admin/playlists/{pid}", headers=admin).status_code == 200
    assert db.query(Playlist).count() == 0
    assert db.query(VideoPlaylist).count() == 0


# ---------- Analytics ----------


def test_analytics(client, admin, make_category, make_video):
    music = make_category("Music")
    make_category("Empty")
    popular = make_video(title="Popular", views=50, category_id=music.id)
    make_video(title="Quiet", views=3, category_id=music.id)
    make_video(title="Loose", views=10)

    body = client.get("/api/admin/analytics", headers=admin).json()
    assert body["total_videos"] == 3
    assert body["total_categories"] == 2
    assert body["total_users"] == 2  # admin + default video owner
    assert [v["title"] for v in body["top_videos"]] == ["Popular", "Loose", "Quiet"]
    assert body["top_videos"][0] == {"id": popular.id, "title": "Popular", "views": 50}
    assert body["top_categories"][0] == {"id": music.id, "name": "Music", "count": 2}
    assert body["top_categories"][1]["count"] == 0
