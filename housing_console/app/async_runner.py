from __future__ import annotations

import asyncio
import threading
from typing import Any, Awaitable, Optional, TypeVar

from ..infra.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class AsyncRunner:
    """Runs coroutines on one long-lived event loop owned by a daemon thread.

    Streamlit reruns the page script on the UI thread; the aiohttp session and
    the query cache's in-flight tasks must all live on a single loop, so every
    coroutine goes through here instead of ``asyncio.run``.
    """

    def __init__(self, name: str = "housing-console-loop"):
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, name=name, daemon=True)
        self._thread.start()

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive() and not self._loop.is_closed()

    def run(self, coro: Awaitable[T], timeout: Optional[float] = None) -> T:
        """Block the calling thread until ``coro`` finishes on the background loop."""
        if not self.is_running:
            raise RuntimeError("AsyncRunner is stopped")
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result(timeout)

    def stop(self) -> None:
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)
        if not self._thread.is_alive():
            self._loop.close()
        else:
            logger.warning("Event loop thread did not stop in time")

    def __enter__(self) -> "AsyncRunner":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.stop()
