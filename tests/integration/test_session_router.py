"""Integration tests for the chat session endpoints."""

from datetime import datetime, timedelta

import fakeredis.aioredis
from httpx import AsyncClient

from tests.helpers import make_auth_headers, seed_message, seed_session, seed_user

BASE = datetime(2026, 5, 1, 12, 0, 0)


class TestListSessions:
    async def test_lists_only_sessions_with_user_messages(
        self, authed_client: AsyncClient, user_id: int
    ) -> None:
        await seed_session(user_id, title="Never used")
        used = await seed_session(user_id, title="Charging")
        await seed_message(used, "How long does charging take?")

        resp = await authed_client.get("/api/v1/sessions")

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert [s["title"] for s in data["sessions"]] == ["Charging"]
        assert data["sessions"][0]["last_message"] == "How long does charging take?"
        assert data["has_next"] is False

    async def test_cursor_pagination(
        self, authed_client: AsyncClient, user_id: int
    ) -> None:
        for i in range(3):
            sid = await seed_session(user_id, updated_at=BASE + timedelta(minutes=i))
            await seed_message(sid, f"question {i}")

        page1 = (await authed_client.get("/api/v1/sessions?limit=2")).json()["data"]
        page2 = (
            await authed_client.get(
                "/api/v1/sessions",
                params={"limit": 2, "cursor": page1["next_cursor"]},
            )
        ).json()["data"]

        assert len(page1["sessions"]) == 2
        assert page1["has_next"] is True
        assert len(page2["sessions"]) == 1
        assert page2["has_next"] is False

    async def test_invalid_cursor(self, authed_client: AsyncClient) -> None:
        resp = await authed_client.get("/api/v1/sessions?cursor=garbage!!")
        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_CURSOR"


class TestSessionLifecycle:
    async def test_create_append_read(self, authed_client: AsyncClient) -> None:
        created = await authed_client.post("/api/v1/sessions")
        assert created.status_code == 201
        session = created.json()["data"]
        assert session["title"].startswith("Chat ")

        for is_user, content in ((True, "Hi"), (False, "Hello! How can I help?")):
            resp = await authed_client.post(
                f"/api/v1/sessions/{session['id']}/messages",
                json={"content": content, "is_user": is_user},
            )
            assert resp.status_code == 201

        detail = (await authed_client.get(f"/api/v1/sessions/{session['id']}")).json()
        messages = detail["data"]["messages"]
        assert [m["content"] for m in messages] == ["Hi", "Hello! How can I help?"]
        assert [m["is_user"] for m in messages] == [True, False]

    async def test_message_needs_content_or_file(
        self, authed_client: AsyncClient, user_id: int
    ) -> None:
        sid = await seed_session(user_id)
        resp = await authed_client.post(
            f"/api/v1/sessions/{sid}/messages", json={"content": " ", "is_user": True}
        )
        assert resp.status_code == 422

    async def test_rename(self, authed_client: AsyncClient, user_id: int) -> None:
        sid = await seed_session(user_id)

        resp = await authed_client.patch(
            f"/api/v1/sessions/{sid}/title", json={"title": "  Brakes  "}
        )

        assert resp.status_code == 200
        assert resp.json()["data"]["title"] == "Brakes"

    async def test_rename_validation(
        self, authed_client: AsyncClient, user_id: int
    ) -> None:
        sid = await seed_session(user_id)
        for title in ("   ", "x" * 101):
            resp = await authed_client.patch(
                f"/api/v1/sessions/{sid}/title", json={"title": title}
            )
            assert resp.status_code == 422

    async def test_delete(self, authed_client: AsyncClient, user_id: int) -> None:
        sid = await seed_session(user_id)
        await seed_message(sid, "hello")

        resp = await authed_client.delete(f"/api/v1/sessions/{sid}")
        assert resp.status_code == 200

        missing = await authed_client.get(f"/api/v1/sessions/{sid}")
        assert missing.status_code == 404


class TestOwnership:
    async def test_foreign_session_looks_missing(
        self,
        async_client: AsyncClient,
        fake_redis: fakeredis.aioredis.FakeRedis,
    ) -> None:
        owner = await seed_user()
        intruder = await seed_user(phone="5550000002")
        sid = await seed_session(owner)
        headers = make_auth_headers(fake_redis, user_id=intruder, phone="5550000002")

        for method, path, body in (
            ("GET", f"/api/v1/sessions/{sid}", None),
            ("PATCH", f"/api/v1/sessions/{sid}/title", {"title": "mine"}),
            ("DELETE", f"/api/v1/sessions/{sid}", None),
            ("POST", f"/api/v1/sessions/{sid}/messages", {"content": "x", "is_user": True}),
        ):
            resp = await async_client.request(method, path, json=body, headers=headers)
            assert resp.status_code == 404
            assert resp.json()["code"] == "SESSION_NOT_FOUND"
