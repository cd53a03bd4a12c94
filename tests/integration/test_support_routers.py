"""Integration tests for feedback, order and file endpoints."""

from datetime import datetime

from httpx import AsyncClient

from evolve_support.core.config import settings
from tests.helpers import seed_order, seed_user


class TestFeedback:
    async def test_submit_and_list(self, authed_client: AsyncClient) -> None:
        resp = await authed_client.post(
            "/api/v1/feedback",
            json={
                "original_question": "How do I fold it?",
                "chatbot_response": "Press the latch.",
                "user_feedback": "There is no latch on my model.",
            },
        )
        assert resp.status_code == 201
        assert resp.json()["data"]["status"] == "pending"

        listed = await authed_client.get("/api/v1/feedback")
        assert len(listed.json()["data"]) == 1

    async def test_feedback_too_short(self, authed_client: AsyncClient) -> None:
        resp = await authed_client.post(
            "/api/v1/feedback",
            json={
                "original_question": "Q",
                "chatbot_response": "A",
                "user_feedback": "short",
            },
        )
        assert resp.status_code == 422


class TestOrders:
    async def test_lists_own_orders_newest_first(
        self, authed_client: AsyncClient, user_id: int
    ) -> None:
        other = await seed_user(phone="5550000002")
        await seed_order(user_id, "EV-1", datetime(2026, 1, 1))
        await seed_order(user_id, "EV-2", datetime(2026, 2, 1), status="delivered")
        await seed_order(other, "EV-3", datetime(2026, 3, 1))

        resp = await authed_client.get("/api/v1/orders")

        assert resp.status_code == 200
        assert [o["order_number"] for o in resp.json()["data"]] == ["EV-2", "EV-1"]


class TestFiles:
    async def test_upload_and_fetch(
        self, authed_client: AsyncClient, user_id: int
    ) -> None:
        resp = await authed_client.post(
            "/api/v1/files",
            files={"file": ("Manual.PDF", b"%PDF-1.7 manual", "application/pdf")},
        )

        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["file_name"] == "Manual.PDF"
        assert data["url"].startswith(f"{settings.file_upload.files_url}/{user_id}/")
        assert data["url"].endswith(".pdf")

        path = data["url"].removeprefix("http://test")
        fetched = await authed_client.get(path)
        assert fetched.status_code == 200
        assert fetched.content == b"%PDF-1.7 manual"

    async def test_too_large(self, authed_client: AsyncClient) -> None:
        payload = b"0" * (settings.file_upload.max_file_size_bytes + 1)

        resp = await authed_client.post(
            "/api/v1/files", files={"file": ("big.bin", payload, "application/octet-stream")}
        )

        assert resp.status_code == 413
        assert resp.json()["code"] == "FILE_TOO_LARGE"

    async def test_requires_sign_in(self, async_client: AsyncClient) -> None:
        resp = await async_client.post(
            "/api/v1/files", files={"file": ("a.txt", b"a", "text/plain")}
        )
        assert resp.status_code == 401
