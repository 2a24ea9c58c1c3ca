"""Tests for scraped-result filtering and agent answer parsing."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from furniflip.agents.extraction import extract_fields
from furniflip.agents.lens import (
    RESULTS_MARKER, is_currency, lens_url, navigate_to_lens, parse_candidates, search_by_image,
)
from furniflip.errors import LensError
from furniflip.models.schemas import ExtractionResult, ScrapeResult

SAMPLE_CARDS = [
    {"title": " Oak Dining Table ", "url": "https://www.wayfair.com/oak-table", "price": "$349.99 "},
    {"title": "Oak Table (sold out)", "url": "https://example.com/a", "price": "Out of stock"},
    {"title": "Farmhouse Oak Table", "url": "https://www.ikea.com/p/1", "price": "£220"},
    {"title": "No link", "url": None, "price": "$10"},
    {"title": "Rustic Table", "url": "https://shop.example/b", "price": "From $99"},
    {"title": None, "url": "https://shop.example/c", "price": "$80"},
]

AGENT_ANSWER = """[ANALYSIS]
- A solid wood table with four legs

[OUTPUT]
name: "Oak Farmhouse Dining Table"
category: Table
condition: Good
price: 180
description: Solid oak table,\\nseats six"""


class TestCurrency:
    def test_symbols(self):
        assert is_currency("$12")
        assert is_currency("€ 40")
        assert is_currency("£1,200.00")

    def test_rejects_non_prices(self):
        assert not is_currency("Out of stock")
        assert not is_currency("From $99")
        assert not is_currency("$")
        assert not is_currency("")


class TestParseCandidates:
    def test_keeps_complete_priced_cards_in_order(self):
        candidates = parse_candidates(SAMPLE_CARDS)
        assert [c.title for c in candidates] == ["Oak Dining Table", "Farmhouse Oak Table"]
        assert candidates[0].price == "$349.99"
        assert candidates[0].url == "https://www.wayfair.com/oak-table"

    def test_every_price_starts_with_currency_symbol(self):
        for c in parse_candidates(SAMPLE_CARDS):
            assert c.price[0] in "$€£¥"

    def test_empty(self):
        assert parse_candidates([]) == []

    def test_top_truncates(self):
        cards = [{"title": f"T{i}", "url": f"https://x.com/{i}", "price": f"${i + 1}"} for i in range(30)]
        result = ScrapeResult(image_url="https://img/1.jpg", candidates=parse_candidates(cards))
        top = result.top(20)
        assert len(top) == 20
        assert top[0].title == "T0"
        assert top[-1].title == "T19"


def test_lens_url_encodes_image_url():
    url = lens_url("https://cdn.example.com/inventory/a b.jpg?x=1&y=2")
    assert url.startswith("https://lens.google.com/uploadbyurl?url=https%3A%2F%2F")
    assert "&y" not in url


class TestExtractFields:
    def test_missing_fields_default_to_empty(self):
        fields = extract_fields("name: Oak Table\ncategory: Furniture\nprice: 120")
        result = ExtractionResult.from_fields(fields)
        assert result.name == "Oak Table"
        assert result.category == "Furniture"
        assert result.price == "120"
        assert result.condition == ""
        assert result.description == ""
        assert result.missing == ["condition", "description"]
        assert result.partial

    def test_full_answer(self):
        result = ExtractionResult.from_fields(extract_fields(AGENT_ANSWER))
        assert result.name == "Oak Farmhouse Dining Table"
        assert result.condition == "Good"
        assert result.description == "Solid oak table,\nseats six"
        assert not result.partial

    def test_multiline_value_runs_to_next_label(self):
        fields = extract_fields("description: line one\nline two\nprice: 5")
        assert fields["description"] == "line one\nline two"
        assert fields["price"] == "5"

    def test_later_label_wins(self):
        fields = extract_fields("name: <placeholder>\nname: Walnut Desk")
        assert fields["name"] == "Walnut Desk"

    def test_single_quotes_stripped(self):
        assert extract_fields("name: 'Teak Chair'")["name"] == "Teak Chair"

    def test_no_labels(self):
        result = ExtractionResult.from_fields(extract_fields("I could not identify this item."))
        assert result.name == ""
        assert len(result.missing) == 5


def _lens_page(raw_cards=None):
    page = MagicMock()
    page.goto = AsyncMock()
    page.wait_for_function = AsyncMock()
    page.query_selector = AsyncMock(return_value=object())
    page.evaluate = AsyncMock(return_value=raw_cards)
    return page


class TestLensNavigation:
    @pytest.mark.asyncio
    async def test_navigation_timeout_becomes_lens_error(self):
        page = _lens_page()
        page.goto.side_effect = PlaywrightTimeoutError("Timeout 30000ms exceeded")
        with pytest.raises(LensError, match="timed out"):
            await navigate_to_lens(page, "https://img/1.jpg")
        page.wait_for_function.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_results_wait_timeout_becomes_lens_error(self):
        page = _lens_page()
        page.wait_for_function.side_effect = [None, PlaywrightTimeoutError("Timeout 30000ms exceeded")]
        with pytest.raises(LensError):
            await navigate_to_lens(page, "https://img/1.jpg", timeout=0.5)
        assert page.goto.await_args.kwargs["timeout"] == 500

    @pytest.mark.asyncio
    async def test_error_marker_instead_of_results(self):
        page = _lens_page()
        page.query_selector.return_value = None
        with pytest.raises(LensError, match="Target element not found"):
            await navigate_to_lens(page, "https://img/1.jpg")
        page.query_selector.assert_awaited_once_with(RESULTS_MARKER)
        assert page.wait_for_function.await_count == 1

    @pytest.mark.asyncio
    async def test_search_returns_filtered_candidates(self):
        page = _lens_page(SAMPLE_CARDS)
        result = await search_by_image(page, "https://img/1.jpg")
        assert page.goto.await_args.args[0] == lens_url("https://img/1.jpg")
        assert result.image_url == "https://img/1.jpg"
        assert [c.price for c in result.candidates] == ["$349.99", "£220"]

    @pytest.mark.asyncio
    async def test_search_with_no_cards(self):
        result = await search_by_image(_lens_page(None), "https://img/1.jpg")
        assert result.candidates == []
