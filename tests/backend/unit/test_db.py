"""
Unit tests for core.db.
Tests config building, the connect retry loop and the health monitor,
with Tortoise patched out.
"""
import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from tortoise.exceptions import DBConnectionError

from synqit.core.db import MODEL_MODULES, Database, DatabaseHealthMonitor, build_tortoise_config


class TestTortoiseConfig:

    def test_includes_aerich_by_default(self):
        config = build_tortoise_config("sqlite://:memory:")
        models = config["apps"]["models"]["models"]
        assert models[:len(MODEL_MODULES)] == MODEL_MODULES
        assert "aerich.models" in models
        assert config["connections"]["default"] == "sqlite://:memory:"
        assert config["use_tz"] is True

    def test_without_aerich(self):
        config = build_tortoise_config("sqlite://:memory:", with_aerich=False)
        assert "aerich.models" not in config["apps"]["models"]["models"]


class TestDatabaseConnect:

    def test_retries_then_succeeds(self):
        db = Database("sqlite://:memory:", max_retries=3, retry_delay=0)
        init = AsyncMock(side_effect=[DBConnectionError("refused"), None])
        with patch("synqit.core.db.Tortoise.init", init), \
                patch("synqit.core.db.Tortoise.generate_schemas", AsyncMock()) as generate:
            asyncio.run(db.connect())
        assert init.await_count == 2
        generate.assert_not_awaited()

    def test_gives_up_after_max_retries(self):
        db = Database("sqlite://:memory:", max_retries=2, retry_delay=0)
        init = AsyncMock(side_effect=ConnectionError("refused"))
        with patch("synqit.core.db.Tortoise.init", init):
            with pytest.raises(ConnectionError):
                asyncio.run(db.connect())
        assert init.await_count == 2

    def test_generate_schemas_on_request(self):
        db = Database("sqlite://:memory:", with_aerich=False)
        with patch("synqit.core.db.Tortoise.init", AsyncMock()), \
                patch("synqit.core.db.Tortoise.generate_schemas", AsyncMock()) as generate:
            asyncio.run(db.connect(generate_schemas=True))
        generate.assert_awaited_once()


class TestHealthMonitor:

    def test_check_once_tracks_state(self):
        db = Database("sqlite://:memory:")
        monitor = DatabaseHealthMonitor(db, interval=60)
        assert monitor.healthy is None

        with patch.object(db, "ping", AsyncMock(side_effect=[True, False, True])):
            assert asyncio.run(monitor.check_once()) is True
            assert asyncio.run(monitor.check_once()) is False
            assert monitor.healthy is False
            assert asyncio.run(monitor.check_once()) is True
        assert monitor.healthy is True

    def test_start_and_stop(self):
        db = Database("sqlite://:memory:")
        monitor = DatabaseHealthMonitor(db, interval=0.01)

        async def run():
            with patch.object(db, "ping", AsyncMock(return_value=True)):
                monitor.start()
                assert monitor.running
                await asyncio.sleep(0.05)
                await monitor.stop()

        asyncio.run(run())
        assert monitor.running is False
        assert monitor.healthy is True
