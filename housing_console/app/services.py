"""
Service wiring: one place that builds the transport, API, session store and
query client from a ``ConsoleConfig``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import aiohttp

from ..adapters.http.api import HousingApi
from ..adapters.http.transport import CredentialTransport
from ..infra.config import ConsoleConfig, load_config
from ..infra.logging import LoggerManager, get_logger
from ..ports.storage import SessionStorage, browser_session_storage, new_browser_id
from .query_client import QueryClient
from .session_store import SessionStore

logger = get_logger(__name__)


@dataclass
class ConsoleServices:
    config: ConsoleConfig
    storage: SessionStorage
    transport: CredentialTransport
    api: HousingApi
    session_store: SessionStore
    query_client: QueryClient

    async def aclose(self) -> None:
        await self.transport.close()


def configure_logging(config: ConsoleConfig) -> None:
    LoggerManager.set_level(config.log_level)
    if config.log_file:
        LoggerManager.set_log_file(config.log_file)


def build_services(
    config: Optional[ConsoleConfig] = None,
    storage: Optional[SessionStorage] = None,
    browser_id: Optional[str] = None,
    http_session: Optional[aiohttp.ClientSession] = None,
) -> ConsoleServices:
    """
    Wire the console. Call ``session_store.restore()`` before any protected fetch.

    Without an explicit ``storage`` the persisted login lives under
    ``config.storage_dir/<browser_id>``; a fresh id is drawn when none is given.
    ``http_session`` is a shared aiohttp session the transport borrows.
    """
    config = config or load_config()
    configure_logging(config)

    if storage is None:
        storage = browser_session_storage(config.storage_dir, browser_id or new_browser_id())
    transport = CredentialTransport(
        config.api_base_url, timeout=config.request_timeout, session=http_session
    )
    api = HousingApi(transport, config.endpoints, config.auth_path)
    session_store = SessionStore(storage, api, transport)
    query_client = QueryClient(api, stale_seconds=config.stale_seconds)

    # lists fetched under one identity must not be shown to the next one
    session_store.subscribe(lambda _store: query_client.invalidate())

    logger.info(f"Console wired against {config.api_base_url}")
    return ConsoleServices(
        config=config,
        storage=storage,
        transport=transport,
        api=api,
        session_store=session_store,
        query_client=query_client,
    )
