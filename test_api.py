import re

import pytest
from fastapi.testclient import TestClient

from postwall.backend import InMemoryBackend
from postwall.config import Settings
from postwall.errors import BackendError
from postwall.main import create_app
from postwall.service import DEFAULT_POST
from postwall.storage import PostStore


def make_settings(seed: bool = False) -> Settings:
    settings = Settings()
    settings.SEED_DEFAULT_POST = seed
    settings.STORE_BACKEND = "memory"
    return settings


@pytest.fixture
def store():
    return PostStore(InMemoryBackend())


@pytest.fixture
def client(store):
    app = create_app(make_settings(), store=store)
    with TestClient(app) as c:
        yield c


BOB = {"alias": "Bob", "avatar": "\U0001F3C2", "content": "hi", "editId": "123456"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["backend"] == "ok"


def test_list_empty(client):
    response = client.get("/api/posts")
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": []}


def test_bob_scenario(client, store):
    response = client.post("/api/posts", json=BOB)
    assert response.status_code == 201
    created = response.json()["data"]
    assert created["editId"] == "123456"
    post_id = created["id"]

    response = client.patch(f"/api/posts/{post_id}", json={
        "editId": "000000", "updates": {"content": "hacked"},
    })
    assert response.status_code == 403
    assert response.json() == {"success": False, "error": "Invalid edit ID"}
    assert store.get(post_id).model_dump() == created

    response = client.patch(f"/api/posts/{post_id}", json={
        "editId": "123456", "updates": {"content": "hi there"},
    })
    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["content"] == "hi there"
    assert updated["timestamp"] >= created["timestamp"]
    assert updated["alias"] == "Bob"
    assert updated["avatar"] == "\U0001F3C2"
    assert updated["editId"] == "123456"


def test_create_without_edit_id(client):
    payload = {k: v for k, v in BOB.items() if k != "editId"}
    response = client.post("/api/posts", json=payload)
    assert response.status_code == 201
    assert re.fullmatch(r"\d{6}", response.json()["data"]["editId"])


def test_created_post_is_listed_first(client):
    first = client.post("/api/posts", json=BOB).json()["data"]
    second = client.post("/api/posts", json={**BOB, "content": "second"}).json()["data"]
    assert first["id"] != second["id"]
    posts = client.get("/api/posts").json()["data"]
    assert {p["id"] for p in posts} == {first["id"], second["id"]}
    assert posts[0]["timestamp"] >= posts[1]["timestamp"]


def test_create_validation_errors(client):
    response = client.post("/api/posts", json={**BOB, "content": "x" * 301})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["field"] == "content"
    assert body["error"] == "Content must be 300 characters or less"

    response = client.post("/api/posts", json={**BOB, "alias": "abc!"})
    assert response.status_code == 400
    assert response.json()["field"] == "alias"

    response = client.post("/api/posts", json={**BOB, "alias": "abc-123 DEF"})
    assert response.status_code == 201


def test_create_rejects_wrong_types_and_bad_json(client):
    response = client.post("/api/posts", json={**BOB, "content": 42})
    assert response.status_code == 400
    assert response.json()["field"] == "content"

    response = client.post("/api/posts", content="{nope",
                           headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_patch_unknown_post(client):
    response = client.patch("/api/posts/nothere", json={
        "editId": "123456", "updates": {"content": "x"},
    })
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Post not found"}


def test_patch_requires_an_update(client):
    post_id = client.post("/api/posts", json=BOB).json()["data"]["id"]
    response = client.patch(f"/api/posts/{post_id}", json={"editId": "123456", "updates": {}})
    assert response.status_code == 400
    assert response.json()["field"] == "updates"


def test_list_failure_is_generic(store):
    class DownBackend(InMemoryBackend):
        def lrange(self, key, start, stop):
            raise BackendError("connection refused to 10.0.0.1")

    app = create_app(make_settings(), store=PostStore(DownBackend()))
    with TestClient(app) as c:
        response = c.get("/api/posts")
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to retrieve posts"}


def test_startup_seeds_default_post(store):
    app = create_app(make_settings(seed=True), store=store)
    with TestClient(app) as c:
        posts = c.get("/api/posts").json()["data"]
    assert len(posts) == 1
    assert posts[0]["alias"] == DEFAULT_POST["alias"]


def test_routing_errors_use_envelope(client):
    response = client.patch("/api/posts", json={"editId": "123456", "updates": {"content": "x"}})
    assert response.status_code == 405
    assert response.json()["success"] is False
    assert response.json()["error"] == "Method Not Allowed"

    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Not Found"}


def test_get_single_post(client):
    created = client.post("/api/posts", json=BOB).json()["data"]
    response = client.get(f"/api/posts/{created['id']}")
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": created}

    response = client.get("/api/posts/nothere")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Post not found"}

    response = client.get("/api/posts/bad-id!")
    assert response.status_code == 400
    assert response.json()["field"] == "id"


def test_patch_with_blank_edit_id(client):
    post_id = client.post("/api/posts", json=BOB).json()["data"]["id"]
    response = client.patch(f"/api/posts/{post_id}", json={"editId": "", "updates": {"content": "x"}})
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Edit ID is required", "field": "editId"}


def test_patch_with_non_alphanumeric_id(client):
    response = client.patch("/api/posts/abc-123", json={"editId": "123456", "updates": {"content": "x"}})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["field"] == "id"


def test_health_reports_unreachable_backend(store):
    class SilentBackend(InMemoryBackend):
        def ping(self):
            return False

    app = create_app(make_settings(), store=PostStore(SilentBackend()))
    with TestClient(app) as c:
        response = c.get("/health")
    assert response.status_code == 200
    assert response.json()["backend"] == "unavailable"
