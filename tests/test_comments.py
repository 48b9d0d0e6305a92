from app.models import VideoComment


def test_blank_comment_rejected(client, db, make_video):
    video = make_video()
    for body in ({"content": "   "}, {"content": ""}, {}):
        resp = client.post(f"/api/videos/{video.id}/comments", json=body)
        assert resp.status_code == 400
    assert db.query(VideoComment).count() == 0


def test_anonymous_comment_round_trip(client, make_video):
    video = make_video()
    resp = client.post(f"/api/videos/{video.id}/comments", json={"content": "  hello  "})
    assert resp.status_code == 201
    created = resp.json()
    assert created["content"] == "hello"
    assert created["user_id"] is None
    assert client.cookies.get("sessionId")

    listed = client.get(f"/api/videos/{video.id}/comments").json()
    assert [c["content"] for c in listed] == ["hello"]
    assert listed[0]["id"] == created["id"]


def test_comment_session_recorded(client, db, make_video):
    video = make_video()
    client.post(f"/api/video-likes/{video.id}")
    token = client.cookies.get("sessionId")
    client.post(f"/api/videos/{video.id}/comments", json={"content": "from session"})
    row = db.query(VideoComment).one()
    assert row.session_id == token
    assert row.user_id is None


def test_comments_newest_first(client, make_user, make_video):
    user, headers = make_user(email="writer@example.com")
    video = make_video()
    for text in ("first", "second", "third"):
        client.post(f"/api/videos/{video.id}/comments", json={"content": text}, headers=headers)
    listed = client.get(f"/api/videos/{video.id}/comments").json()
    assert [c["content"] for c in listed] == ["third", "second", "first"]
    assert {c["author_email"] for c in listed} == {"writer@example.com"}
    assert {c["user_id"] for c in listed} == {user.id}


def test_comments_on_missing_video(client):
    assert client.get("/api/videos/999/comments").status_code == 404
    assert client.post("/api/videos/999/comments", json={"content": "x"}).status_code == 404


def test_author_deletes_own_comment(client, make_user, make_video):
    _, headers = make_user()
    video = make_video()
    comment_id = client.post(
        f"/api/videos/{video.id}/comments", json={"content": "mine"}, headers=headers
    ).json()["id"]
    resp = client.delete(f"/api/videos/{video.id}/comments/{comment_id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Comment deleted"}
    assert client.get(f"/api/videos/{video.id}/comments").json() == []


def test_other_user_cannot_delete(client, make_user, make_video):
    _, author = make_user()
    _, other = make_user()
    video = make_video()
    comment_id = client.post(
        f"/api/videos/{video.id}/comments", json={"content": "mine"}, headers=author
    ).json()["id"]
    resp = client.delete(f"/api/videos/{video.id}/comments/{comment_id}", headers=other)
    assert resp.status_code == 403
    assert len(client.get(f"/api/videos/{video.id}/comments").json()) == 1


def test_delete_requires_login(client, make_video):
    video = make_video()
    comment_id = client.post(f"/api/videos/{video.id}/comments", json={"content": "anon"}).json()["id"]
    assert client.delete(f"/api/videos/{video.id}/comments/{comment_id}").status_code == 401


def test_admin_deletes_anonymous_comment(client, make_user, make_video):
    _, admin = make_user(is_admin=True)
    video = make_video()
    comment_id = client.post(f"/api/videos/{video.id}/comments", json={"content": "anon"}).json()["id"]
    resp = client.delete(f"/api/videos/{video.id}/comments/{comment_id}", headers=admin)
    assert resp.status_code == 200


def test_delete_comment_of_other_video_is_not_found(client, make_user, make_video):
    _, headers = make_user()
    video, other = make_video(), make_video()
    comment_id = client.post(
        f"/api/videos/{video.id}/comments", json={"content": "x"}, headers=headers
    ).json()["id"]
    assert client.delete(f"/api/videos/{other.id}/comments/{comment_id}", headers=headers).status_code == 404


def test_moderation_lists_all_video_comments(client, make_user, make_video):
    _, admin = make_user(is_admin=True)
    a = make_video(title="Alpha")
    b = make_video(title="Beta")
    client.post(f"/api/videos/{a.id}/comments", json={"content": "on alpha"})
    client.post(f"/api/videos/{b.id}/comments", json={"content": "on beta"})

    resp = client.get(f"/api/videos/{a.id}/comments/admin", headers=admin)
    assert resp.status_code == 200
    rows = resp.json()
    assert [r["content"] for r in rows] == ["on beta", "on alpha"]
    assert rows[0]["video_title"] == "Beta"
    assert rows[0]["video_id"] == b.id
    assert rows[0]["session_id"] == client.cookies.get("sessionId")


def test_moderation_delete_any_comment(client, db, make_user, make_video):
    _, author = make_user()
    _, admin = make_user(is_admin=True)
    video = make_video()
    comment_id = client.post(
        f"/api/videos/{video.id}/comments", json={"content": "spam"}, headers=author
    ).json()["id"]
    resp = client.delete(f"/api/videos/{video.id}/comments/admin/{comment_id}", headers=admin)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Comment permanently removed"}
    assert db.query(VideoComment).count() == 0
    assert client.delete(f"/api/videos/{video.id}/comments/admin/{comment_id}", headers=admin).status_code == 404


def test_moderation_requires_admin(client, make_user, make_video):
    _, user = make_user()
    video = make_video()
    assert client.get(f"/api/videos/{video.id}/comments/admin").status_code == 401
    assert client.get(f"/api/videos/{video.id}/comments/admin", headers=user).status_code == 403
    assert client.delete(f"/api/videos/{video.id}/comments/admin/1", headers=user).status_code == 403


def test_post_comments(client, make_user, make_post):
    _, admin = make_user(is_admin=True)
    post = make_post("Weekly notes")
    created = client.post(f"/api/posts/{post.id}/comments", json={"content": "nice post"})
    assert created.status_code == 201
    assert [c["content"] for c in client.get(f"/api/posts/{post.id}/comments").json()] == ["nice post"]

    rows = client.get(f"/api/posts/{post.id}/comments/admin", headers=admin).json()
    assert rows[0]["post_title"] == "Weekly notes"
    assert rows[0]["post_id"] == post.id
    assert client.get("/api/posts/999/comments").status_code == 404
