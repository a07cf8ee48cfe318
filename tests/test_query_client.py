"""
Unit tests: query client (cache, de-duplication, invalidation)
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from housing_console.adapters.http.transport import TRANSPORT_FAILURE_MESSAGE, ApiResponse, ErrorKind
from housing_console.app.query_client import QueryClient, QueryState
from housing_console.domain.models import BuildingRecord, EntityKind

BUILDINGS = [
    {"buildingId": 1, "name": "A", "type": "male", "numberOfFloors": 3, "status": "active"},
    {"id": "2", "buildingName": "B"},
]


class FakeApi:
    def __init__(self, list_response=None):
        self.list_response = list_response or ApiResponse.success(BUILDINGS, 200)
        self.list_calls = 0
        self.writes = []
        self.write_response = ApiResponse.success({"ok": True}, 200)
        self.gate = None  # asyncio.Event; when set, list() waits for it

    async def list(self, kind):
        self.list_calls += 1
        response = self.list_response  # what the server holds when the request arrives
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(response, Exception):
            raise response
        return response

    async def create(self, kind, payload):
        self.writes.append(("create", kind, payload))
        return self.write_response

    async def update(self, kind, record_id, payload):
        self.writes.append(("update", kind, record_id, payload))
        return self.write_response

    async def delete(self, kind, record_id):
        self.writes.append(("delete", kind, record_id))
        return self.write_response


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def make_client(api=None, stale_seconds=300):
    api = api or FakeApi()
    clock = FakeClock()
    return QueryClient(api, stale_seconds=stale_seconds, clock=clock), api, clock


class TestReads:

    def test_normalized_records(self):
        qc, _, _ = make_client()
        result = asyncio.run(qc.list(EntityKind.BUILDINGS))
        assert result.state is QueryState.SUCCESS
        assert [type(r) for r in result.data] == [BuildingRecord, BuildingRecord]
        assert result.data[0].building_id == 1
        assert result.data[1].building_id == 2
        assert result.data[1].name == "B"

    def test_bare_and_wrapped_lists_are_equivalent(self):
        bare, _, _ = make_client(FakeApi(ApiResponse.success(BUILDINGS, 200)))
        wrapped, _, _ = make_client(FakeApi(ApiResponse.success({"data": BUILDINGS}, 200)))
        assert asyncio.run(bare.list("buildings")).data == asyncio.run(wrapped.list("buildings")).data

    def test_unexpected_shape_is_empty_success(self):
        qc, _, _ = make_client(FakeApi(ApiResponse.success({"items": []}, 200)))
        result = asyncio.run(qc.list(EntityKind.BUILDINGS))
        assert result.is_success
        assert result.data == ()

    def test_fresh_cache_served_without_refetch(self):
        qc, api, clock = make_client()

        async def scenario():
            await qc.list(EntityKind.BUILDINGS)
            clock.now += 299
            await qc.list(EntityKind.BUILDINGS)
            clock.now += 2
            await qc.list(EntityKind.BUILDINGS)

        asyncio.run(scenario())
        assert api.list_calls == 2

    def test_force_refetches(self):
        qc, api, _ = make_client()

        async def scenario():
            await qc.list(EntityKind.BUILDINGS)
            await qc.list(EntityKind.BUILDINGS, force=True)

        asyncio.run(scenario())
        assert api.list_calls == 2

    def test_concurrent_reads_share_one_request(self):
        qc, api, _ = make_client()

        async def scenario():
            api.gate = asyncio.Event()
            first = asyncio.ensure_future(qc.list(EntityKind.BUILDINGS))
            second = asyncio.ensure_future(qc.list(EntityKind.BUILDINGS))
            await asyncio.sleep(0)
            assert qc.peek(EntityKind.BUILDINGS).is_loading
            api.gate.set()
            return await asyncio.gather(first, second)

        first, second = asyncio.run(scenario())
        assert api.list_calls == 1
        assert first.data == second.data

    def test_errors_are_not_cached(self):
        api = FakeApi(ApiResponse.failure(ErrorKind.HTTP, "Server error", 500))
        qc, _, _ = make_client(api)

        async def scenario():
            failed = await qc.list(EntityKind.BUILDINGS)
            api.list_response = ApiResponse.success(BUILDINGS, 200)
            ok = await qc.list(EntityKind.BUILDINGS)
            return failed, ok

        failed, ok = asyncio.run(scenario())
        assert failed.is_error
        assert failed.error == "Server error"
        assert ok.is_success
        assert api.list_calls == 2

    def test_exception_becomes_error_result(self):
        qc, _, _ = make_client(FakeApi(RuntimeError("boom")))
        result = asyncio.run(qc.list(EntityKind.BUILDINGS))
        assert result.is_error
        assert result.error == TRANSPORT_FAILURE_MESSAGE

    def test_peek(self):
        qc, _, _ = make_client()
        assert qc.peek(EntityKind.BUILDINGS).state is QueryState.IDLE
        asyncio.run(qc.list(EntityKind.BUILDINGS))
        assert qc.peek(EntityKind.BUILDINGS).is_success


class TestInvalidation:

    def test_successful_write_invalidates_kind(self):
        qc, api, _ = make_client()

        async def scenario():
            await qc.list(EntityKind.BUILDINGS)
            result = await qc.create(EntityKind.BUILDINGS, {"name": "C"})
            await qc.list(EntityKind.BUILDINGS)
            return result

        result = asyncio.run(scenario())
        assert result.success
        assert api.list_calls == 2
        assert api.writes == [("create", EntityKind.BUILDINGS, {"name": "C"})]

    def test_failed_write_keeps_cache(self):
        qc, api, _ = make_client()
        api.write_response = ApiResponse.failure(ErrorKind.HTTP, "Name taken", 409)

        async def scenario():
            await qc.list(EntityKind.BUILDINGS)
            result = await qc.update(EntityKind.BUILDINGS, 1, {"name": "A"})
            await qc.list(EntityKind.BUILDINGS)
            return result

        result = asyncio.run(scenario())
        assert result.success is False
        assert result.error == "Name taken"
        assert api.list_calls == 1

    def test_write_only_invalidates_its_kind(self):
        qc, _, _ = make_client()

        async def scenario():
            await qc.list(EntityKind.BUILDINGS)
            await qc.list(EntityKind.ROOMS)
            await qc.delete(EntityKind.BUILDINGS, 1)

        asyncio.run(scenario())
        assert qc.peek(EntityKind.BUILDINGS).state is QueryState.IDLE
        assert qc.peek(EntityKind.ROOMS).is_success

    def test_result_from_before_invalidation_is_not_cached(self):
        qc, api, _ = make_client()

        async def scenario():
            api.gate = asyncio.Event()
            pending = asyncio.ensure_future(qc.list(EntityKind.BUILDINGS))
            while api.list_calls == 0:
                await asyncio.sleep(0)
            qc.invalidate()
            api.gate.set()
            return await pending

        result = asyncio.run(scenario())
        assert result.is_success
        assert qc.peek(EntityKind.BUILDINGS).state is QueryState.IDLE

    def test_read_after_write_does_not_join_older_fetch(self):
        old_rows = [{"buildingId": 1, "name": "Old"}]
        new_rows = [{"buildingId": 1, "name": "New"}]
        api = FakeApi(ApiResponse.success(old_rows, 200))
        qc, _, _ = make_client(api)

        async def scenario():
            api.gate = asyncio.Event()
            before = asyncio.ensure_future(qc.list(EntityKind.BUILDINGS))
            while api.list_calls == 0:
                await asyncio.sleep(0)

            api.list_response = ApiResponse.success(new_rows, 200)
            written = await qc.update(EntityKind.BUILDINGS, 1, {"name": "New"})
            after = asyncio.ensure_future(qc.list(EntityKind.BUILDINGS))
            for _ in range(10):
                if api.list_calls >= 2:
                    break
                await asyncio.sleep(0)
            api.gate.set()
            return written, await before, await after

        written, before, after = asyncio.run(scenario())
        assert written.success
        assert api.list_calls == 2
        assert before.data[0].name == "Old"
        assert after.data[0].name == "New"
        assert qc.peek(EntityKind.BUILDINGS).data[0].name == "New"
