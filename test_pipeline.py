"""Tests for the inventory pipeline orchestrator. Every external stage is mocked."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from furniflip.errors import LensError
from furniflip.models.schemas import CandidateListing, ExtractionResult, InventoryInfo, ScrapeResult
from furniflip.tools.browser_pool import BrowserPool
from furniflip.workflow.inventory import InventoryAgent

IMAGES = ["https://img/1.jpg", "https://img/2.jpg", "https://img/3.jpg"]

VOCAB = {"category": ["Table", "Chair", "Storage"], "condition": ["New", "Good", "Fair"]}


class FakePool:
    """Tracks concurrently held pages."""

    def __init__(self):
        self.held = 0
        self.max_held = 0
        self.released = 0

    async def acquire(self):
        self.held += 1
        self.max_held = max(self.max_held, self.held)
        return object()

    async def release(self, page):
        self.held -= 1
        self.released += 1


async def _fake_search(page, image_url):
    await asyncio.sleep(0.01)
    if image_url == "https://img/2.jpg":
        raise LensError("Google Lens timed out")
    candidates = [
        CandidateListing(title=f"Listing {i}", url=f"https://shop.example/{i}", price=f"${100 + i}")
        for i in range(25)
    ]
    return ScrapeResult(image_url=image_url, candidates=candidates)


async def _fake_extract(image_url, candidates, categories, conditions, tool):
    return ExtractionResult(
        name="Listing 3", category=categories[0], condition=conditions[1],
        price="$50", description="A table",
    )


def _patches():
    return (
        patch("furniflip.workflow.inventory.db.get_types", side_effect=lambda t: VOCAB[t]),
        patch("furniflip.workflow.inventory.search_by_image", side_effect=_fake_search),
        patch("furniflip.workflow.inventory.create_retrieval_tool", new_callable=AsyncMock),
        patch("furniflip.workflow.inventory.run_extraction_agent", side_effect=_fake_extract),
    )


@pytest.mark.asyncio
async def test_failed_image_is_dropped():
    pool = FakePool()
    p_types, p_search, p_tool, p_extract = _patches()
    with p_types, p_search, p_tool, p_extract, \
            patch("furniflip.workflow.inventory.sentry_sdk.capture_exception") as mock_capture:
        items = await InventoryAgent(pool, preferred_hosts=[]).run(IMAGES)

    mock_capture.assert_called_once()
    assert isinstance(mock_capture.call_args.args[0], LensError)
    assert len(items) == 2
    assert {i.image_url for i in items} == {"https://img/1.jpg", "https://img/3.jpg"}
    assert all(isinstance(i, InventoryInfo) for i in items)
    assert pool.released == 3
    assert pool.held == 0


@pytest.mark.asyncio
async def test_record_fields_and_truncated_candidates():
    pool = FakePool()
    p_types, p_search, p_tool, p_extract = _patches()
    with p_types, p_search, p_tool as mock_tool, p_extract:
        items = await InventoryAgent(pool, preferred_hosts=[]).run(["https://img/1.jpg"])

    [info] = items
    assert info.category == "Table"
    assert info.condition == "Good"
    assert info.similar_url == "https://shop.example/3"
    urls = mock_tool.await_args.args[0]
    assert len(urls) == 20
    assert urls[0] == "https://shop.example/0"


@pytest.mark.asyncio
async def test_vocabularies_loaded_once():
    pool = FakePool()
    p_types, p_search, p_tool, p_extract = _patches()
    with p_types as mock_types, p_search, p_tool, p_extract:
        await InventoryAgent(pool).run(IMAGES)
    assert sorted(c.args[0] for c in mock_types.call_args_list) == ["category", "condition"]


@pytest.mark.asyncio
async def test_concurrency_is_bounded():
    pool = FakePool()
    images = [f"https://img/{i}.jpg" for i in range(10, 22)]
    p_types, p_search, p_tool, p_extract = _patches()
    with p_types, p_search, p_tool, p_extract:
        items = await InventoryAgent(pool, concurrency=3).run(images)
    assert len(items) == 12
    assert pool.max_held <= 3


@pytest.mark.asyncio
async def test_acquire_failure_yields_no_record():
    pool = FakePool()
    pool.acquire = AsyncMock(side_effect=RuntimeError("browser gone"))
    pool.release = AsyncMock()
    p_types, p_search, p_tool, p_extract = _patches()
    with p_types, p_search, p_tool, p_extract:
        items = await InventoryAgent(pool).run(IMAGES)
    assert items == []
    pool.release.assert_not_awaited()


def test_inventory_info_is_immutable():
    info = InventoryInfo(
        name="Oak Table", category="Table", condition="Good", price="120",
        description="Oak", image_url="https://img/1.jpg", similar_url="",
    )
    with pytest.raises(Exception):
        info.name = "Pine Table"


class CrashedPage:
    async def goto(self, url, **kwargs):
        raise RuntimeError("Target page, context or browser has been closed")

    async def close(self):
        raise RuntimeError("Target page, context or browser has been closed")


class CrashedBrowser:
    async def new_page(self):
        return CrashedPage()


@pytest.mark.asyncio
async def test_crashed_pages_do_not_sink_the_run():
    pool = BrowserPool(max_pages=1, headless=True)
    await pool._warm(CrashedBrowser())
    pool._ready.set()

    p_types, p_search, p_tool, p_extract = _patches()
    with p_types, p_search, p_tool, p_extract:
        items = await InventoryAgent(pool, preferred_hosts=[]).run(IMAGES)

    assert {i.image_url for i in items} == {"https://img/1.jpg", "https://img/3.jpg"}


@pytest.mark.asyncio
async def test_release_error_is_contained():
    pool = FakePool()
    pool.release = AsyncMock(side_effect=RuntimeError("release failed"))
    p_types, p_search, p_tool, p_extract = _patches()
    with p_types, p_search, p_tool, p_extract:
        items = await InventoryAgent(pool, preferred_hosts=[]).run(IMAGES)

    assert len(items) == 2
    assert pool.release.await_count == 3
