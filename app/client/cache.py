"""Client-side state for one list of notices.

``NoticeCache`` owns a ``QueryState`` and is its only writer. Each ``load``
issues exactly one request; overlapping loads are allowed and nothing is
cancelled, but every load carries a sequence number and a response older than
the most recently issued load is dropped, so the visible state always belongs
to the latest FilterSpec.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Awaitable, Callable, List, Optional

from app.core.exceptions import NoticeBoardAPIError
from app.schemas.notice import FilterSpec, NoticeListOut, NoticeOut, PaginationOut

logger = logging.getLogger(__name__)

FETCH_FAILED = "Failed to fetch notices"

FetchPage = Callable[[FilterSpec], Awaitable[NoticeListOut]]
Listener = Callable[["QueryState"], None]


@dataclass(frozen=True)
class QueryState:
    notices: List[NoticeOut] = field(default_factory=list)
    loading: bool = False
    error: Optional[str] = None
    pagination: PaginationOut = field(default_factory=PaginationOut)


class NoticeCache:
    def __init__(self, fetch: FetchPage, spec: Optional[FilterSpec] = None):
        self._fetch = fetch
        self._spec = spec or FilterSpec()
        self._state = QueryState()
        self._seq = 0
        self._listeners: List[Listener] = []

    @property
    def state(self) -> QueryState:
        return self._state

    @property
    def spec(self) -> FilterSpec:
        return self._spec

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _set(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)

    async def load(self, spec: Optional[FilterSpec] = None) -> QueryState:
        if spec is not None:
            self._spec = spec
        spec = self._spec
        self._seq += 1
        seq = self._seq

        self._set(loading=True, error=None)
        try:
            page = await self._fetch(spec)
        except NoticeBoardAPIError as exc:
            if seq != self._seq:
                logger.debug("Dropping stale failure for request #%d", seq)
                return self._state
            self._set(notices=[], loading=False, error=exc.message or FETCH_FAILED)
            return self._state

        if seq != self._seq:
            logger.debug("Dropping stale response for request #%d (latest #%d)", seq, self._seq)
            return self._state
        self._set(notices=list(page.notices), pagination=page.pagination, loading=False, error=None)
        return self._state

    async def refresh(self) -> QueryState:
        """Re-run the last FilterSpec, e.g. after a create/update/delete."""
        return await self.load()

    # "try again" after a failed load
    retry = refresh
