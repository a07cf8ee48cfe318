"""
Query/mutation layer.

Caches normalized lists per entity kind, shares one in-flight fetch between
concurrent readers, and invalidates a kind's list after every successful write.
Cached lists are never patched; the next read refetches and renormalizes.
"""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from ..adapters.http.api import HousingApi
from ..adapters.http.transport import TRANSPORT_FAILURE_MESSAGE, ApiResponse
from ..domain.models import CanonicalRecord, EntityKind, RecordId, RecordList
from ..domain.normalizers import NORMALIZERS, unwrap_list
from ..infra.logging import get_logger
from ..infra.serialization import summarize_for_logging

logger = get_logger(__name__)

KindLike = Union[EntityKind, str]


def _looks_like_list_payload(payload: Any) -> bool:
    return payload is None or isinstance(payload, list) or (
        isinstance(payload, Mapping) and isinstance(payload.get("data"), list)
    )


class QueryState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class QueryResult:
    state: QueryState
    data: RecordList = ()
    error: Optional[str] = None
    fetched_at: Optional[float] = None

    @property
    def is_loading(self) -> bool:
        return self.state is QueryState.LOADING

    @property
    def is_error(self) -> bool:
        return self.state is QueryState.ERROR

    @property
    def is_success(self) -> bool:
        return self.state is QueryState.SUCCESS


@dataclass(frozen=True)
class MutationResult:
    success: bool
    data: Any = None
    error: Optional[str] = None


@dataclass
class _CacheEntry:
    records: RecordList
    fetched_at: float


class QueryClient:
    """
    Args:
        api: remote endpoints
        stale_seconds: how long a cached list is served without refetching
        normalizers: entity kind -> normalizer (defaults to the domain registry)
        clock: monotonic time source, injectable for tests
    """

    def __init__(
        self,
        api: HousingApi,
        stale_seconds: float = 300.0,
        normalizers: Optional[Mapping[EntityKind, Callable[[Any], CanonicalRecord]]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._api = api
        self.stale_seconds = stale_seconds
        self._normalizers = dict(normalizers or NORMALIZERS)
        self._clock = clock
        self._cache: Dict[EntityKind, _CacheEntry] = {}
        self._in_flight: Dict[EntityKind, asyncio.Task] = {}
        self._generation: Dict[EntityKind, int] = {}

    # ------------------------------------------------------------------ reads

    def _is_fresh(self, entry: _CacheEntry) -> bool:
        return (self._clock() - entry.fetched_at) < self.stale_seconds

    def peek(self, kind: KindLike) -> QueryResult:
        """Non-blocking view of a kind's list: in-flight, cached, or idle."""
        kind = EntityKind.parse(kind)
        task = self._in_flight.get(kind)
        if task is not None and not task.done():
            return QueryResult(QueryState.LOADING)
        entry = self._cache.get(kind)
        if entry is not None:
            return QueryResult(QueryState.SUCCESS, entry.records, fetched_at=entry.fetched_at)
        return QueryResult(QueryState.IDLE)

    async def list(self, kind: KindLike, *, force: bool = False) -> QueryResult:
        kind = EntityKind.parse(kind)
        entry = self._cache.get(kind)
        if entry is not None and not force and self._is_fresh(entry):
            return QueryResult(QueryState.SUCCESS, entry.records, fetched_at=entry.fetched_at)

        task = self._in_flight.get(kind)
        if task is None or task.done():
            task = asyncio.ensure_future(self._fetch(kind))
            self._in_flight[kind] = task
            task.add_done_callback(lambda t, k=kind: self._forget(k, t))
        else:
            logger.debug(f"Joining in-flight fetch for {kind.value}")
        # shielded: one caller going away must not cancel the fetch for the others
        return await asyncio.shield(task)

    def _forget(self, kind: EntityKind, task: asyncio.Task) -> None:
        if self._in_flight.get(kind) is task:
            del self._in_flight[kind]

    async def _fetch(self, kind: EntityKind) -> QueryResult:
        generation = self._generation.get(kind, 0)
        try:
            response = await self._api.list(kind)
        except Exception as e:
            logger.error(f"Fetching {kind.value} raised: {e}", exc_info=True)
            return QueryResult(QueryState.ERROR, error=TRANSPORT_FAILURE_MESSAGE)
        if not response.ok:
            logger.warning(f"Fetching {kind.value} failed: {response.error}")
            return QueryResult(QueryState.ERROR, error=response.error)

        # list-vs-wrapped detection happens here, once per fetch
        items = unwrap_list(response.data)
        if not items and not _looks_like_list_payload(response.data):
            logger.warning(f"Unexpected {kind.value} list shape: {summarize_for_logging(response.data)}")
        normalize = self._normalizers[kind]
        records = tuple(normalize(item) for item in items)
        fetched_at = self._clock()

        if self._generation.get(kind, 0) == generation:
            self._cache[kind] = _CacheEntry(records, fetched_at)
        else:
            logger.debug(f"Discarding stale {kind.value} result (invalidated during fetch)")
        logger.info(f"Fetched {len(records)} {kind.value}")
        return QueryResult(QueryState.SUCCESS, records, fetched_at=fetched_at)

    def invalidate(self, kind: Optional[KindLike] = None) -> None:
        """
        Drop cached lists (one kind, or all).

        A fetch already in flight is detached: its current callers still get its
        result, but it is not cached and the next read starts a new fetch.
        """
        kinds = list(EntityKind) if kind is None else [EntityKind.parse(kind)]
        for k in kinds:
            self._cache.pop(k, None)
            self._in_flight.pop(k, None)
            self._generation[k] = self._generation.get(k, 0) + 1

    # --------------------------------------------------------------- writes

    async def _mutate(self, kind: EntityKind, action: str, call: Awaitable[ApiResponse]) -> MutationResult:
        try:
            response = await call
        except Exception as e:
            logger.error(f"{action} {kind.value} raised: {e}", exc_info=True)
            return MutationResult(success=False, error=TRANSPORT_FAILURE_MESSAGE)
        if not response.ok:
            logger.warning(f"{action} {kind.value} failed: {response.error}")
            return MutationResult(success=False, error=response.error)
        self.invalidate(kind)
        logger.info(f"{action} {kind.value} succeeded")
        return MutationResult(success=True, data=response.data)

    async def create(self, kind: KindLike, payload: Dict[str, Any]) -> MutationResult:
        kind = EntityKind.parse(kind)
        return await self._mutate(kind, "create", self._api.create(kind, payload))

    async def update(self, kind: KindLike, record_id: RecordId, payload: Dict[str, Any]) -> MutationResult:
        kind = EntityKind.parse(kind)
        return await self._mutate(kind, "update", self._api.update(kind, record_id, payload))

    async def delete(self, kind: KindLike, record_id: RecordId) -> MutationResult:
        kind = EntityKind.parse(kind)
        return await self._mutate(kind, "delete", self._api.delete(kind, record_id))
