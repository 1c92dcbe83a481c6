from datetime import datetime, timedelta

from sqlalchemy.exc import OperationalError

from postboard.core.config import settings
from postboard.core.database import get_db_session
from postboard.dependencies import get_like_repository, get_post_repository
from postboard.main import app
from postboard.repositories.exceptions import RepositoryError
from postboard.repositories.like_repository import LikeRepository


async def _create(client, content="hello", **extra):
    resp = await client.post("/api/posts", json={"content": content, **extra})
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _like(client, post_id, user_id):
    return await client.post(f"/api/posts/{post_id}/like", json={"userId": user_id})


async def _unlike(client, post_id, user_id):
    return await client.request("DELETE", f"/api/posts/{post_id}/like", json={"userId": user_id})


# ─── 동작 확인 ───────────────────────────────────────────────────────

async def test_index_returns_fixed_html(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert resp.text.startswith("<h1>")


async def test_health_reports_post_count(client):
    await _create(client)
    resp = await client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["total_posts"] == 1


async def test_cors_allows_configured_origin_only(client):
    origin = settings.cors_origin_list[0]
    allowed = await client.get("/api/posts", headers={"Origin": origin})
    assert allowed.headers["access-control-allow-origin"] == origin

    denied = await client.get("/api/posts", headers={"Origin": "http://evil.example"})
    assert "access-control-allow-origin" not in denied.headers


# ─── 게시글 ─────────────────────────────────────────────────────────

async def test_list_is_empty_array_without_posts(client):
    resp = await client.get("/api/posts")
    assert resp.status_code == 200
    assert resp.json() == []


async def test_create_post_returns_created_row(client):
    body = await _create(client, "  hello  ", imageUrl="https://img.example/a.png", userId="alice")
    assert set(body) == {"id", "content", "imageUrl", "userId", "createdAt", "updatedAt"}
    assert body["content"] == "hello"
    assert body["imageUrl"] == "https://img.example/a.png"
    assert body["userId"] == "alice"
    assert isinstance(body["id"], int)


async def test_create_post_defaults_optional_fields_to_null(client):
    body = await _create(client, "no extras")
    assert body["imageUrl"] is None
    assert body["userId"] is None


def _parse_timestamp(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


async def test_timestamps_are_serialized_as_utc(client):
    created = await _create(client)
    listed = (await client.get("/api/posts")).json()[0]
    for body in (created, listed):
        for key in ("createdAt", "updatedAt"):
            assert _parse_timestamp(body[key]).utcoffset() == timedelta(0)


async def test_blank_content_is_rejected_and_not_persisted(client):
    for payload in ({"content": ""}, {"content": "   \n\t"}, {}, {"imageUrl": "x"}):
        resp = await client.post("/api/posts", json=payload)
        assert resp.status_code == 400
        assert "error" in resp.json()

    listed = await client.get("/api/posts")
    assert listed.json() == []


async def test_non_string_content_is_client_error(client):
    resp = await client.post("/api/posts", json={"content": 42})
    assert resp.status_code == 400
    assert "error" in resp.json()


async def test_malformed_json_body_is_client_error(client):
    resp = await client.post(
        "/api/posts", content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400


async def test_created_post_is_listed_with_zero_likes(client):
    created = await _create(client, "hello")
    listed = (await client.get("/api/posts")).json()
    assert len(listed) == 1
    assert listed[0]["id"] == created["id"]
    assert listed[0]["content"] == "hello"
    assert listed[0]["likeCount"] == 0
    assert listed[0]["isLiked"] is False


async def test_list_is_newest_first(client):
    first = await _create(client, "first")
    second = await _create(client, "second")
    third = await _create(client, "third")
    ids = [p["id"] for p in (await client.get("/api/posts")).json()]
    assert ids == [third["id"], second["id"], first["id"]]


async def test_delete_post_then_delete_again_is_not_found(client):
    created = await _create(client)
    resp = await client.delete(f"/api/posts/{created['id']}")
    assert resp.status_code == 200
    assert str(created["id"]) in resp.json()["message"]

    again = await client.delete(f"/api/posts/{created['id']}")
    assert again.status_code == 404
    assert "error" in again.json()
    assert (await client.get("/api/posts")).json() == []


async def test_delete_with_non_numeric_id_is_rejected_without_mutation(client):
    await _create(client)
    for bad in ("abc", "12abc", "1.5"):
        resp = await client.delete(f"/api/posts/{bad}")
        assert resp.status_code == 400
        assert "error" in resp.json()
    assert len((await client.get("/api/posts")).json()) == 1


async def test_delete_removes_likes(client, session):
    created = await _create(client)
    await _like(client, created["id"], "alice")
    await _like(client, created["id"], "bob")

    resp = await client.delete(f"/api/posts/{created['id']}")
    assert resp.status_code == 200
    assert await LikeRepository(session).count_by_post(created["id"]) == 0


# ─── 좋아요 ─────────────────────────────────────────────────────────

async def test_like_twice_conflicts_and_keeps_count(client):
    created = await _create(client)

    first = await _like(client, created["id"], "alice")
    assert first.status_code == 201
    assert first.json() == {"likeCount": 1, "isLiked": True}

    second = await _like(client, created["id"], "alice")
    assert second.status_code == 400
    assert "error" in second.json()

    listed = (await client.get("/api/posts")).json()
    assert listed[0]["likeCount"] == 1


async def test_likes_from_different_users_accumulate(client):
    created = await _create(client)
    await _like(client, created["id"], "alice")
    resp = await _like(client, created["id"], "bob")
    assert resp.json() == {"likeCount": 2, "isLiked": True}


async def test_unlike_never_liked_is_idempotent(client):
    created = await _create(client)
    for _ in range(2):
        resp = await _unlike(client, created["id"], "alice")
        assert resp.status_code == 200
        assert resp.json() == {"likeCount": 0, "isLiked": False}


async def test_unlike_after_like_decrements(client):
    created = await _create(client)
    await _like(client, created["id"], "alice")
    await _like(client, created["id"], "bob")

    resp = await _unlike(client, created["id"], "alice")
    assert resp.status_code == 200
    assert resp.json() == {"likeCount": 1, "isLiked": False}

    relike = await _like(client, created["id"], "alice")
    assert relike.status_code == 201
    assert relike.json() == {"likeCount": 2, "isLiked": True}


async def test_list_reports_is_liked_per_user(client):
    liked = await _create(client, "liked")
    other = await _create(client, "other")
    await _like(client, liked["id"], "alice")

    by_alice = {p["id"]: p for p in (await client.get("/api/posts", params={"userId": "alice"})).json()}
    assert by_alice[liked["id"]]["isLiked"] is True
    assert by_alice[liked["id"]]["likeCount"] == 1
    assert by_alice[other["id"]]["isLiked"] is False

    by_bob = (await client.get("/api/posts", params={"userId": "bob"})).json()
    assert all(p["isLiked"] is False for p in by_bob)

    anonymous = (await client.get("/api/posts")).json()
    assert all(p["isLiked"] is False for p in anonymous)
    assert {p["id"]: p["likeCount"] for p in anonymous} == {liked["id"]: 1, other["id"]: 0}


async def test_like_validation_errors(client):
    created = await _create(client)

    bad_id = await _like(client, "abc", "alice")
    assert bad_id.status_code == 400

    missing_user = await client.post(f"/api/posts/{created['id']}/like", json={})
    assert missing_user.status_code == 400

    no_body = await client.post(f"/api/posts/{created['id']}/like")
    assert no_body.status_code == 400

    blank_user = await _like(client, created["id"], "  ")
    assert blank_user.status_code == 400

    unlike_bad_id = await _unlike(client, "abc", "alice")
    assert unlike_bad_id.status_code == 400

    unlike_missing_user = await client.request("DELETE", f"/api/posts/{created['id']}/like", json={})
    assert unlike_missing_user.status_code == 400

    listed = (await client.get("/api/posts")).json()
    assert listed[0]["likeCount"] == 0


async def test_like_unknown_post_is_not_found(client):
    resp = await _like(client, 9999, "alice")
    assert resp.status_code == 404
    assert "error" in resp.json()


# 정수 컬럼 범위를 넘는 ID는 어떤 게시글과도 일치하지 않음
HUGE_ID = "99999999999999999999"


async def test_delete_with_out_of_range_id_is_not_found(client):
    await _create(client)
    resp = await client.delete(f"/api/posts/{HUGE_ID}")
    assert resp.status_code == 404
    assert "error" in resp.json()
    assert len((await client.get("/api/posts")).json()) == 1


async def test_like_with_out_of_range_id_is_not_found(client):
    resp = await _like(client, HUGE_ID, "alice")
    assert resp.status_code == 404
    assert "error" in resp.json()

    no_user = await client.post(f"/api/posts/{HUGE_ID}/like", json={})
    assert no_user.status_code == 400


async def test_unlike_with_out_of_range_id_reports_zero_state(client):
    resp = await _unlike(client, HUGE_ID, "alice")
    assert resp.status_code == 200
    assert resp.json() == {"likeCount": 0, "isLiked": False}


# ─── 저장소 실패 ─────────────────────────────────────────────────────

class _BrokenPostRepository:
    async def list_with_like_state(self, user_id=None):
        raise RepositoryError("connection refused: db.internal:3306")

    async def create(self, content, image_url=None, user_id=None):
        raise RepositoryError("disk I/O error")

    async def delete(self, post_id):
        raise RepositoryError("lock wait timeout")


async def test_store_failures_become_generic_server_errors(client):
    app.dependency_overrides[get_post_repository] = lambda: _BrokenPostRepository()

    listed = await client.get("/api/posts")
    assert listed.status_code == 500
    assert "db.internal" not in listed.json()["error"]

    created = await client.post("/api/posts", json={"content": "hello"})
    assert created.status_code == 500
    assert "disk" not in created.json()["error"]

    deleted = await client.delete("/api/posts/1")
    assert deleted.status_code == 500
    assert "lock" not in deleted.json()["error"]


class _BrokenLikeRepository:
    async def add(self, post_id, user_id):
        raise RepositoryError("deadlock found on db.internal")

    async def remove(self, post_id, user_id):
        raise RepositoryError("deadlock found on db.internal")

    async def count_by_post(self, post_id):
        raise RepositoryError("deadlock found on db.internal")


async def test_like_store_failures_become_generic_server_errors(client):
    app.dependency_overrides[get_like_repository] = lambda: _BrokenLikeRepository()

    liked = await _like(client, 1, "alice")
    assert liked.status_code == 500
    assert "db.internal" not in liked.json()["error"]

    unliked = await _unlike(client, 1, "alice")
    assert unliked.status_code == 500
    assert "db.internal" not in unliked.json()["error"]


class _UnreachableSession:
    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("unable to open database file"))


async def test_health_reports_unreachable_store_as_503(client):
    async def _broken_session():
        yield _UnreachableSession()

    app.dependency_overrides[get_db_session] = _broken_session

    resp = await client.get("/health")
    assert resp.status_code == 503
    body = resp.json()
    assert body["status"] == "unhealthy"
    assert body["connection"] == "error"
