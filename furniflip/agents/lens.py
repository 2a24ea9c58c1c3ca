"""Google Lens scraper: reverse image search driven through a Playwright page."""

import logging
import re
from urllib.parse import quote

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..config import LENS_TIMEOUT_S
from ..errors import LensError
from ..models.schemas import CandidateListing, ScrapeResult

logger = logging.getLogger(__name__)

_LENS_URL = "https://lens.google.com/uploadbyurl?url={url}"

# Google Lens result markup. These change without notice.
RESULTS_MARKER = ".UAiK1e"
ERROR_MARKER = ".error-message"
RESULT_CARD = ".Vd9M6"
CARD_TITLE = ".UAiK1e"
CARD_LINK = ".GZrdsf"
CARD_PRICE = ".DdKZJb"

_CURRENCY_RE = re.compile(r"^[$€£¥]\s?\d")

_READY_JS = f"""() => document.querySelector('{RESULTS_MARKER}') || document.querySelector('{ERROR_MARKER}')"""
_HAS_RESULTS_JS = f"""() => document.querySelectorAll('{RESULT_CARD}').length > 0"""
_SCRAPE_JS = f"""() => Array.from(document.querySelectorAll('{RESULT_CARD}')).map((el) => {{
    const title = el.querySelector('{CARD_TITLE}');
    const link = el.querySelector('{CARD_LINK}');
    const price = el.querySelector('{CARD_PRICE}');
    return {{
        title: title ? title.textContent : null,
        url: link ? link.getAttribute('href') : null,
        price: price ? price.textContent : null,
    }};
}})"""


def lens_url(image_url: str) -> str:
    return _LENS_URL.format(url=quote(image_url, safe=""))


def is_currency(text: str) -> bool:
    """True when the text starts with a currency symbol followed by a digit."""
    return bool(_CURRENCY_RE.match(text.strip()))


def parse_candidates(raw: list[dict]) -> list[CandidateListing]:
    """Keep complete result cards with a currency price, in page order."""
    candidates: list[CandidateListing] = []
    for card in raw:
        title, url, price = card.get("title"), card.get("url"), card.get("price")
        if not (title and url and price):
            continue
        price = price.strip()
        if not is_currency(price):
            continue
        candidates.append(CandidateListing(title=title.strip(), url=url, price=price))
    return candidates


async def navigate_to_lens(page: Page, image_url: str, timeout: float = LENS_TIMEOUT_S) -> None:
    """Load Lens results for the image and wait until result cards render.

    Raises:
        LensError: navigation or either wait timed out, or the page rendered
            its error marker instead of results.
    """
    timeout_ms = timeout * 1000
    try:
        await page.goto(lens_url(image_url), wait_until="networkidle", timeout=timeout_ms)
        await page.wait_for_function(_READY_JS, timeout=timeout_ms)
        if await page.query_selector(RESULTS_MARKER) is None:
            raise LensError("Target element not found, possible error on page")
        await page.wait_for_function(_HAS_RESULTS_JS, timeout=timeout_ms)
    except PlaywrightTimeoutError as e:
        logger.error("Google Lens timed out for %s: %s", image_url, e)
        raise LensError(f"Google Lens timed out: {e}") from e


async def scrape_candidates(page: Page) -> list[CandidateListing]:
    raw = await page.evaluate(_SCRAPE_JS)
    return parse_candidates(raw or [])


async def search_by_image(page: Page, image_url: str) -> ScrapeResult:
    """Run a reverse image search and return the priced matches."""
    await navigate_to_lens(page, image_url)
    candidates = await scrape_candidates(page)
    logger.info("Google Lens returned %d priced matches for %s", len(candidates), image_url)
    return ScrapeResult(image_url=image_url, candidates=candidates)
