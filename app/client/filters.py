from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, Set, TypeVar

from app.client.config import ClientSettings
from app.schemas.notice import FilterSpec

logger = logging.getLogger(__name__)

T = TypeVar("T")

OnChange = Callable[[FilterSpec], Awaitable[Any]]


class Debouncer(Generic[T]):
    """Deliver only the last value pushed within a quiet window of ``delay`` seconds.

    Once the callback has started it runs to completion; a later push only
    cancels a delivery that is still waiting out the window.
    """

    def __init__(self, delay: float, callback: Callable[[T], Awaitable[Any]]):
        self.delay = delay
        self._callback = callback
        self._latest: Optional[T] = None
        self._pending: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def push(self, value: T) -> None:
        self._latest = value
        self.cancel()
        task = asyncio.get_running_loop().create_task(self._fire())
        self._pending = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Debounced delivery failed", exc_info=exc)

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    async def _fire(self) -> None:
        await asyncio.sleep(self.delay)
        self._pending = None
        await self._callback(self._latest)

    async def flush(self) -> None:
        """Deliver a waiting value now instead of at the end of the window."""
        if self._pending is not None:
            self.cancel()
            await self._callback(self._latest)

    async def drain(self) -> None:
        """Wait for every delivery started by this debouncer to finish."""
        while True:
            tasks = [t for t in self._tasks if not t.done()]
            if not tasks:
                return
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for r in results:
                if isinstance(r, Exception):
                    raise r


class FilterController:
    """Owns the current FilterSpec and reports each effective change once.

    ``set_search``, ``set_audience`` and ``set_include_expired`` go back to
    page 1; ``set_page`` touches nothing else. Keystrokes go through
    ``type_search`` and are debounced. A change that leaves the spec as it
    was does not call ``on_change``.
    """

    def __init__(
        self,
        on_change: OnChange,
        spec: Optional[FilterSpec] = None,
        *,
        debounce: Optional[float] = None,
    ):
        if debounce is None:
            debounce = ClientSettings().search_debounce_seconds
        self._on_change = on_change
        self._spec = spec or FilterSpec()
        self._search_input: Debouncer[str] = Debouncer(debounce, self.set_search)

    @property
    def spec(self) -> FilterSpec:
        return self._spec

    async def _apply(self, new: FilterSpec) -> bool:
        if new == self._spec:
            return False
        self._spec = new
        await self._on_change(new)
        return True

    async def set_search(self, search: str) -> bool:
        return await self._apply(self._spec.with_search(search))

    async def set_audience(self, audience: str) -> bool:
        return await self._apply(self._spec.with_audience(audience))

    async def set_include_expired(self, include_expired: bool) -> bool:
        return await self._apply(self._spec.with_include_expired(include_expired))

    async def set_page(self, page: int) -> bool:
        if page < 1:
            raise ValueError("page must be >= 1")
        return await self._apply(self._spec.with_page(page))

    async def reset(self) -> bool:
        """Clear search, audience and expiry filters (keeps the page size)."""
        self._search_input.cancel()
        return await self._apply(FilterSpec(limit=self._spec.limit))

    def type_search(self, text: str) -> None:
        self._search_input.push(text)

    async def flush_search(self) -> None:
        await self._search_input.flush()

    async def settle(self) -> None:
        await self._search_input.drain()
