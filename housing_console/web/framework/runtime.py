"""
Bridge between Streamlit's synchronous script reruns and the async core.

All coroutines run on one background loop shared by every browser session of
this server process. The aiohttp session is shared the same way; each browser
session still has its own transport and token.
"""
from __future__ import annotations

from typing import Awaitable, Optional, TypeVar

import aiohttp
import streamlit as st

from housing_console.adapters.http.transport import open_client_session
from housing_console.app.async_runner import AsyncRunner

T = TypeVar("T")


@st.cache_resource
def get_async_runner() -> AsyncRunner:
    return AsyncRunner()


async def _open_shared_session() -> aiohttp.ClientSession:
    return open_client_session()


@st.cache_resource
def get_http_session() -> aiohttp.ClientSession:
    """Process-wide aiohttp session, bound to the shared loop."""
    return run(_open_shared_session())


def run(coro: Awaitable[T], timeout: Optional[float] = None) -> T:
    """Run ``coro`` on the shared loop and wait for its result."""
    return get_async_runner().run(coro, timeout=timeout)


__all__ = ["get_async_runner", "get_http_session", "run"]
