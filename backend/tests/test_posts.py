from conftest import auth_headers
from app.storage.local_storage import storage

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def create_post(client, headers, text="hello", **extra):
    return client.post("/api/new/post/no-image", json={"textContent": text, **extra}, headers=headers)


def test_post_routes_require_token(client):
    assert client.get("/api/posts").status_code == 401
    assert client.post("/api/new/post/no-image", json={"textContent": "x"}).status_code == 401
    assert client.delete("/api/posts/1").status_code == 401
    assert client.get("/api/posts", headers=auth_headers("bad")).status_code == 401


def test_create_post_without_image(client, ana):
    user, headers = ana
    response = create_post(client, headers, "first!", displayName="Ana", avatar="/images/a.png")
    assert response.status_code == 201
    body = response.json()
    assert body["postId"] > 0
    assert body["userId"] == user["userId"]
    assert body["username"] == "ana"
    assert body["displayName"] == "Ana"
    assert body["avatar"] == "/images/a.png"
    assert body["textContent"] == "first!"
    assert body["image"] is None
    assert body["createdAt"] is not None


def test_create_post_ignores_identity_in_body(client, ana, ben):
    user, headers = ana
    ben_user, _ = ben
    body = create_post(client, headers, "mine", userId=ben_user["userId"], username="ben").json()
    assert body["userId"] == user["userId"]
    assert body["username"] == "ana"


def test_create_post_requires_text(client, ana):
    _, headers = ana
    response = client.post("/api/new/post/no-image", json={}, headers=headers)
    assert response.status_code == 400
    assert response.json() == {"error": "textContent is a required field"}


def test_create_post_with_image(client, ana):
    _, headers = ana
    response = client.post(
        "/api/new/post",
        data={"textContent": "look", "displayName": "Ana"},
        files={"image": ("photo.JPG", PNG_BYTES, "image/jpeg")},
        headers=headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["textContent"] == "look"
    assert body["image"].startswith("/images/")
    assert body["image"].endswith(".jpg")
    assert len(storage.list_files()) == 1


def test_create_post_with_image_requires_text(client, ana):
    _, headers = ana
    response = client.post(
        "/api/new/post",
        files={"image": ("photo.png", PNG_BYTES, "image/png")},
        headers=headers,
    )
    assert response.status_code == 400
    assert storage.list_files() == []


def test_post_snapshot_survives_profile_edit(client, ana):
    _, headers = ana
    create_post(client, headers, "old name", displayName="Ana")
    client.patch("/api/user/profile/no-image", json={"displayName": "Renamed"}, headers=headers)
    posts = client.get("/api/posts", headers=headers).json()
    assert posts[0]["displayName"] == "Ana"


def test_list_posts_newest_first(client, ana):
    _, headers = ana
    for text in ("one", "two", "three"):
        create_post(client, headers, text)
    posts = client.get("/api/posts", headers=headers).json()
    assert [p["textContent"] for p in posts] == ["three", "two", "one"]
    ids = [p["postId"] for p in posts]
    assert ids == sorted(ids, reverse=True)


def test_list_posts_only_returns_own_posts(client, ana, ben):
    _, ana_headers = ana
    _, ben_headers = ben
    create_post(client, ana_headers, "ana's")
    create_post(client, ben_headers, "ben's")
    posts = client.get("/api/posts", headers=ana_headers).json()
    assert [p["textContent"] for p in posts] == ["ana's"]


def test_delete_own_post(client, ana):
    _, headers = ana
    post = create_post(client, headers, "bye").json()
    response = client.delete(f"/api/posts/{post['postId']}", headers=headers)
    assert response.status_code == 200
    assert [p["postId"] for p in response.json()] == [post["postId"]]
    assert client.get("/api/posts", headers=headers).json() == []


def test_delete_other_users_post_is_noop(client, ana, ben):
    _, ana_headers = ana
    _, ben_headers = ben
    post = create_post(client, ben_headers, "ben's").json()

    response = client.delete(f"/api/posts/{post['postId']}", headers=ana_headers)
    assert response.status_code == 200
    assert response.json() == []

    remaining = client.get("/api/posts", headers=ben_headers).json()
    assert [p["postId"] for p in remaining] == [post["postId"]]


def test_delete_missing_post_is_noop(client, ana):
    _, headers = ana
    response = client.delete("/api/posts/12345", headers=headers)
    assert response.status_code == 200
    assert response.json() == []


def test_delete_post_with_invalid_id_is_bad_request(client, ana):
    _, headers = ana
    assert client.delete("/api/posts/abc", headers=headers).status_code == 400
    assert client.delete("/api/posts/0", headers=headers).status_code == 400


def test_delete_post_with_out_of_range_id_is_noop(client, ana):
    _, headers = ana
    post = create_post(client, headers, "stays").json()
    response = client.delete("/api/posts/99999999999999999999", headers=headers)
    assert response.status_code == 200
    assert response.json() == []
    assert [p["postId"] for p in client.get("/api/posts", headers=headers).json()] == [post["postId"]]
