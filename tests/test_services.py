"""
Integration tests: service wiring and session-driven cache invalidation
"""
import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from housing_console.adapters.http.transport import ApiResponse
from housing_console.app.query_client import QueryState
from housing_console.app.services import build_services
from housing_console.domain.models import EntityKind
from housing_console.infra.config import ConsoleConfig
from housing_console.infra.logging import LoggerManager
from housing_console.ports.storage import TOKEN_KEY, USER_KEY, MemorySessionStorage, new_browser_id


class TestBuildServices:

    def teardown_method(self):
        LoggerManager.reset()

    def test_wiring_and_restore(self, tmp_path):
        storage = MemorySessionStorage({USER_KEY: json.dumps({"id": 1, "username": "admin"}), TOKEN_KEY: "t"})
        services = build_services(ConsoleConfig(storage_dir=tmp_path), storage=storage)

        assert services.api.transport is services.transport
        services.session_store.restore()
        assert services.session_store.is_authenticated
        assert services.transport.has_token

        asyncio.run(services.aclose())

    def test_default_storage_is_scoped_to_browser(self, tmp_path):
        browser_id = new_browser_id()
        services = build_services(ConsoleConfig(storage_dir=tmp_path), browser_id=browser_id)
        services.storage.set_item(TOKEN_KEY, "t")
        assert (tmp_path / browser_id / TOKEN_KEY).exists()

        other = build_services(ConsoleConfig(storage_dir=tmp_path))
        assert other.storage.get_item(TOKEN_KEY) is None

    def test_session_change_invalidates_cached_lists(self, tmp_path):
        services = build_services(ConsoleConfig(storage_dir=tmp_path), storage=MemorySessionStorage())
        qc = services.query_client

        async def fake_list(kind):
            return ApiResponse.success([{"id": 1}], 200)

        services.api.list = fake_list
        asyncio.run(qc.list(EntityKind.ROOMS))
        assert qc.peek(EntityKind.ROOMS).is_success

        services.session_store.restore()  # no session persisted: still a state change
        assert qc.peek(EntityKind.ROOMS).state is QueryState.IDLE
