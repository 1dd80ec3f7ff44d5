"""
Tree Leaves Backend — Health Endpoint Tests
=============================================

What:  Tests for /api/health, /api/health/ready and /api/health/live.
"""

import re
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from app import __version__
from app.main import create_app
from app.services.leaf_store import MemoryLeafStore


class TestLiveness:

    @pytest.mark.asyncio
    async def test_alive(self, test_client):
        response = await test_client.get("/api/health/live")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["status"] == "ALIVE"
        assert body["uptime"] >= 0
        assert body["timestamp"].endswith("Z")


class TestReadiness:

    @pytest.mark.asyncio
    async def test_memory_store_is_ready(self, test_client):
        response = await test_client.get("/api/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "READY"

    @pytest.mark.asyncio
    async def test_file_store_ready_when_writable(self, file_client):
        response = await file_client.get("/api/health/ready")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_file_store_not_ready_when_directory_not_writable(self, file_client):
        with patch("app.services.leaf_store.os.access", return_value=False):
            response = await file_client.get("/api/health/ready")

        assert response.status_code == 503
        body = response.json()
        assert body["success"] is False
        assert body["status"] == "NOT_READY"
        assert body["message"] == "Data directory is not writable"

    @pytest.mark.asyncio
    async def test_not_ready_when_check_raises(self, test_settings):
        store = MemoryLeafStore()
        store.is_writable = MagicMock(side_effect=PermissionError("denied"))
        app = create_app(test_settings, store)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/health/ready")

        assert response.status_code == 503
        assert response.json()["error"] == "denied"


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_reports_leaf_count(self, test_client):
        await test_client.post("/api/leaves", json={"index": 0})
        await test_client.post("/api/leaves", json={"index": 1})

        response = await test_client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["status"] == "OK"
        assert body["environment"] == "test"
        assert body["platform"] == "memory"
        assert body["version"] == __version__
        assert body["pythonVersion"]
        assert set(body["memory"]) == {"used", "total"}
        assert re.fullmatch(r"\d+ MB", body["memory"]["used"])
        assert re.fullmatch(r"\d+ MB", body["memory"]["total"])
        assert body["leaves"] == {"total": 2, "dataFile": "memory"}

    @pytest.mark.asyncio
    async def test_health_file_store_states(self, file_client, file_store):
        body = (await file_client.get("/api/health")).json()
        assert body["leaves"] == {"total": 0, "dataFile": "missing"}

        await file_client.post("/api/leaves", json={"index": 0})
        body = (await file_client.get("/api/health")).json()
        assert body["leaves"] == {"total": 1, "dataFile": "exists"}

        file_store.file_path.write_text("not json", encoding="utf-8")
        body = (await file_client.get("/api/health")).json()
        assert body["status"] == "OK"
        assert body["leaves"] == {"total": 0, "dataFile": "corrupt"}

    @pytest.mark.asyncio
    async def test_health_error_when_store_raises(self, test_settings):
        store = MemoryLeafStore()
        store.read = AsyncMock(side_effect=RuntimeError("boom"))
        app = create_app(test_settings, store)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/health")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["status"] == "ERROR"
        assert body["error"] == "boom"

    @pytest.mark.asyncio
    async def test_health_memory_in_megabytes(self, test_client):
        process = MagicMock()
        process.memory_info.return_value = MagicMock(rss=50 * 1024 * 1024)
        host = MagicMock(total=8 * 1024 * 1024 * 1024)

        with patch("app.routes.health.psutil.Process", return_value=process), \
                patch("app.routes.health.psutil.virtual_memory", return_value=host):
            response = await test_client.get("/api/health")

        assert response.json()["memory"] == {"used": "50 MB", "total": "8192 MB"}
