from __future__ import annotations

import asyncio

import httpx
import pytest

from app.client.api import NoticeBoardClient, NoticeForm
from app.client.cache import FETCH_FAILED, NoticeCache
from app.core.exceptions import NoticeBoardAPIError
from app.schemas.notice import FilterSpec, NoticeListOut, PaginationOut


def _page(*titles, total=None):
    notices = [
        {
            "id": i + 1,
            "title": t,
            "description": "d",
            "targetAudience": "All",
            "priority": "Medium",
            "expiryDate": "2099-01-01T00:00:00",
            "isActive": True,
            "isExpired": False,
            "createdAt": "2024-01-01T00:00:00",
            "updatedAt": "2024-01-01T00:00:00",
        }
        for i, t in enumerate(titles)
    ]
    count = len(titles) if total is None else total
    return NoticeListOut.model_validate(
        {"success": True, "notices": notices, "pagination": {"current": 1, "pages": 1 if count else 0, "total": count}}
    )


@pytest.mark.asyncio
async def test_load_moves_through_loading_to_loaded():
    async def fetch(spec):
        return _page("a", "b")

    cache = NoticeCache(fetch)
    seen = []
    unsubscribe = cache.subscribe(lambda s: seen.append((s.loading, s.error, len(s.notices))))

    state = await cache.load()
    assert seen == [(True, None, 0), (False, None, 2)]
    assert [n.title for n in state.notices] == ["a", "b"]
    assert state.pagination == PaginationOut(current=1, pages=1, total=2)

    unsubscribe()
    await cache.load()
    assert len(seen) == 2


@pytest.mark.asyncio
async def test_failure_clears_notices_and_sets_error():
    calls = {"n": 0}

    async def fetch(spec):
        calls["n"] += 1
        if calls["n"] == 1:
            return _page("a")
        raise NoticeBoardAPIError("Server exploded", status_code=500)

    cache = NoticeCache(fetch)
    await cache.load()
    state = await cache.load()
    assert state.notices == []
    assert state.loading is False
    assert state.error == "Server exploded"


@pytest.mark.asyncio
async def test_failure_without_message_uses_default():
    async def fetch(spec):
        raise NoticeBoardAPIError("")

    state = await NoticeCache(fetch).load()
    assert state.error == FETCH_FAILED


@pytest.mark.asyncio
async def test_a_late_response_for_an_old_spec_is_dropped():
    gate = asyncio.Event()

    async def fetch(spec):
        if spec.search == "old":
            await gate.wait()
            return _page("stale")
        return _page("fresh")

    cache = NoticeCache(fetch)
    slow = asyncio.ensure_future(cache.load(FilterSpec(search="old")))
    await asyncio.sleep(0)
    await cache.load(FilterSpec(search="new"))
    gate.set()
    await slow

    assert [n.title for n in cache.state.notices] == ["fresh"]
    assert cache.state.loading is False
    assert cache.spec.search == "new"


@pytest.mark.asyncio
async def test_a_late_failure_for_an_old_spec_is_dropped():
    gate = asyncio.Event()

    async def fetch(spec):
        if spec.search == "old":
            await gate.wait()
            raise NoticeBoardAPIError("boom")
        return _page("fresh")

    cache = NoticeCache(fetch)
    slow = asyncio.ensure_future(cache.load(FilterSpec(search="old")))
    await asyncio.sleep(0)
    await cache.load(FilterSpec(search="new"))
    gate.set()
    await slow

    assert cache.state.error is None
    assert [n.title for n in cache.state.notices] == ["fresh"]


@pytest.mark.asyncio
async def test_refresh_reuses_the_last_spec():
    specs = []

    async def fetch(spec):
        specs.append(spec)
        return _page()

    cache = NoticeCache(fetch)
    await cache.load(FilterSpec(audience="CSE", page=2))
    await cache.refresh()
    await cache.retry()
    assert specs == [FilterSpec(audience="CSE", page=2)] * 3


@pytest.mark.asyncio
async def test_cache_against_the_running_api(override_db, make_notice, admin, future_iso):
    for i in range(15):
        make_notice(title=f"Notice {i:02d}")

    transport = httpx.ASGITransport(app=override_db)
    async with NoticeBoardClient(base_url="http://test", transport=transport) as api:
        cache = NoticeCache(api.list_notices)
        state = await cache.load(FilterSpec())
        assert len(state.notices) == 12
        assert state.pagination == PaginationOut(current=1, pages=2, total=15)

        await api.login("admin@college.edu", "admin123")
        await api.delete_notice(state.notices[0].id)
        state = await cache.refresh()
        assert state.pagination.total == 14

        before = cache.state
        with pytest.raises(NoticeBoardAPIError) as err:
            await api.create_notice(NoticeForm(description="no title", expiry_date=future_iso))
        assert err.value.status_code == 400
        assert err.value.message == "Title is required"
        assert cache.state is before

        created = await api.create_notice(NoticeForm(title="Fresh", description="d", expiry_date=future_iso))
        state = await cache.refresh()
        assert state.notices[0].id == created.id


@pytest.mark.asyncio
async def test_network_failure_surfaces_as_error_state():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with NoticeBoardClient(base_url="http://test", transport=httpx.MockTransport(handler)) as api:
        state = await NoticeCache(api.list_notices).load()
    assert state.notices == []
    assert state.error == "Network error - please check your connection"


@pytest.mark.asyncio
async def test_non_json_success_body_surfaces_as_error_state():
    def handler(request):
        return httpx.Response(200, text="<html>proxy page</html>", headers={"content-type": "text/html"})

    async with NoticeBoardClient(base_url="http://test", transport=httpx.MockTransport(handler)) as api:
        state = await NoticeCache(api.list_notices).load()
    assert state.loading is False
    assert state.notices == []
    assert state.error == "Unexpected response from server"


@pytest.mark.asyncio
async def test_wrong_shape_success_body_surfaces_as_error_state():
    bodies = iter([{"notices": [{"id": "x"}]}, []])

    def handler(request):
        return httpx.Response(200, json=next(bodies))

    async with NoticeBoardClient(base_url="http://test", transport=httpx.MockTransport(handler)) as api:
        cache = NoticeCache(api.list_notices)
        for _ in range(2):
            state = await cache.load()
            assert state.loading is False
            assert state.notices == []
            assert state.error == "Unexpected response from server"
