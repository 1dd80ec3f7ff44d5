"""
Tree Leaves Backend — Leaves API Tests
========================================

What:  End-to-end tests for /api/leaves through the FastAPI app.
How:   HTTPX AsyncClient with ASGITransport (no server process).

What we test:
    ✅ Envelopes and camelCase keys for list/create/clear/stats
    ✅ 201 for a new leaf, 200 for an existing index
    ✅ 400 for invalid index values and malformed bodies
    ✅ 500 envelope when the store cannot persist
    ✅ File-backed app persists across requests
    ✅ GET /api/leaves/clear only exists when enabled
"""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import create_app
from app.services.leaf_store import MemoryLeafStore


class TestListLeaves:

    @pytest.mark.asyncio
    async def test_empty_list(self, test_client):
        response = await test_client.get("/api/leaves")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["leaves"] == []
        assert body["count"] == 0
        assert body["timestamp"].endswith("Z")
        assert body["platform"] == "memory"
        assert "note" in body

    @pytest.mark.asyncio
    async def test_list_returns_created_leaves_in_order(self, test_client):
        await test_client.post("/api/leaves", json={"index": 5})
        await test_client.post("/api/leaves", json={"index": 2})

        body = (await test_client.get("/api/leaves")).json()

        assert body["count"] == 2
        assert [leaf["index"] for leaf in body["leaves"]] == [5, 2]

    @pytest.mark.asyncio
    async def test_file_backed_list_has_no_note(self, file_client):
        body = (await file_client.get("/api/leaves")).json()
        assert body["platform"] == "local"
        assert "note" not in body


class TestCreateLeaf:

    @pytest.mark.asyncio
    async def test_create_with_index(self, test_client):
        response = await test_client.post("/api/leaves", json={"index": 4})

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Leaf added successfully"
        assert body["totalLeaves"] == 1
        assert body["leaf"]["index"] == 4
        assert body["leaf"]["source"] == "manual"
        assert body["leaf"]["position"] == {"left": "28%", "top": "36%", "rotation": "180deg"}

    @pytest.mark.asyncio
    async def test_create_existing_index_returns_200(self, test_client):
        first = (await test_client.post("/api/leaves", json={"index": 1, "source": "share"})).json()

        response = await test_client.post("/api/leaves", json={"index": 1, "source": "other"})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Leaf already exists"
        assert body["leaf"] == first["leaf"]
        assert body["totalLeaves"] == 1

    @pytest.mark.asyncio
    async def test_create_without_body_auto_assigns(self, test_client):
        await test_client.post("/api/leaves", json={"index": 0})
        await test_client.post("/api/leaves", json={"index": 1})
        await test_client.post("/api/leaves", json={"index": 3})

        response = await test_client.post("/api/leaves")

        assert response.status_code == 201
        assert response.json()["leaf"]["index"] == 2

    @pytest.mark.asyncio
    async def test_create_with_null_index_auto_assigns(self, test_client):
        response = await test_client.post("/api/leaves", json={"index": None, "source": "button"})

        assert response.status_code == 201
        assert response.json()["leaf"]["index"] == 0
        assert response.json()["leaf"]["source"] == "button"

    @pytest.mark.asyncio
    async def test_create_with_custom_position(self, test_client):
        position = {"left": "10%", "top": "90%", "rotation": "7deg"}

        response = await test_client.post("/api/leaves", json={"position": position})

        assert response.json()["leaf"]["position"] == position

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_index", [-1, "3", 2.5, True])
    async def test_invalid_index_rejected(self, test_client, bad_index):
        response = await test_client.post("/api/leaves", json={"index": bad_index})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "validation_error"
        assert body["details"]["errors"][0]["field"].startswith("index")

        listing = (await test_client.get("/api/leaves")).json()
        assert listing["count"] == 0

    @pytest.mark.asyncio
    async def test_malformed_json_rejected(self, test_client):
        response = await test_client.post(
            "/api/leaves",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_incomplete_position_rejected(self, test_client):
        response = await test_client.post("/api/leaves", json={"position": {"left": "1%"}})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_storage_failure_returns_500(self, test_settings):
        store = MemoryLeafStore()
        store.write = AsyncMock(return_value=False)
        app = create_app(test_settings, store)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/api/leaves", json={"index": 0})

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "storage_error"
        assert body["message"] == "An error occurred while saving the leaf data"

    @pytest.mark.asyncio
    async def test_file_backed_create_persists(self, file_client, file_store):
        await file_client.post("/api/leaves", json={"index": 8, "source": "share"})

        stored = await file_store.read()
        assert [(leaf.index, leaf.source) for leaf in stored] == [(8, "share")]


class TestClearLeaves:

    @pytest.mark.asyncio
    async def test_delete_clears_everything(self, test_client):
        for index in range(3):
            await test_client.post("/api/leaves", json={"index": index})

        response = await test_client.delete("/api/leaves")

        assert response.status_code == 200
        body = response.json()
        assert body == {
            "success": True,
            "message": "All leaves cleared successfully",
            "timestamp": body["timestamp"],
        }
        assert (await test_client.get("/api/leaves")).json()["count"] == 0

    @pytest.mark.asyncio
    async def test_get_clear_not_registered_by_default(self, test_client):
        await test_client.post("/api/leaves", json={"index": 0})

        response = await test_client.get("/api/leaves/clear")

        assert response.status_code == 404
        assert (await test_client.get("/api/leaves")).json()["count"] == 1

    @pytest.mark.asyncio
    async def test_get_clear_when_enabled(self, test_settings):
        config = test_settings.model_copy(update={"allow_clear_via_get": True})
        store = MemoryLeafStore()
        app = create_app(config, store)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            await client.post("/api/leaves", json={"index": 0})
            response = await client.get("/api/leaves/clear")

        assert response.status_code == 200
        body = response.json()
        assert body["totalLeaves"] == 0
        assert body["method"] == "GET"
        assert await store.read() == []


class TestLeafStats:

    @pytest.mark.asyncio
    async def test_empty_stats(self, test_client):
        response = await test_client.get("/api/leaves/stats")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["stats"] == {
            "totalLeaves": 0,
            "sources": {},
            "recentLeaves": [],
            "oldestLeaf": None,
            "newestLeaf": None,
        }

    @pytest.mark.asyncio
    async def test_stats_after_creates(self, test_client):
        for index, source in [(0, "manual"), (1, "share"), (2, "share")]:
            await test_client.post("/api/leaves", json={"index": index, "source": source})

        stats = (await test_client.get("/api/leaves/stats")).json()["stats"]

        assert stats["totalLeaves"] == 3
        assert stats["sources"] == {"manual": 1, "share": 2}
        assert len(stats["recentLeaves"]) == 3
        assert stats["oldestLeaf"] is not None
        assert stats["newestLeaf"] is not None
