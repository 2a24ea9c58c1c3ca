"""Inventory pipeline: photo URLs in, one InventoryInfo per recognised item out."""

import asyncio
import logging
import time

import sentry_sdk

from .. import db
from ..agents.extraction import run_extraction_agent
from ..agents.lens import search_by_image
from ..config import CONCURRENCY, MAX_CANDIDATES
from ..models.schemas import InventoryInfo
from ..tools.browser_pool import BrowserPool
from ..tools.retriever import create_retrieval_tool
from .matching import find_similar_url

logger = logging.getLogger(__name__)


class InventoryAgent:
    """Runs each image through Lens → retrieval → extraction → matching.

    Images are processed concurrently, at most ``concurrency`` at a time.
    A failing image is logged, reported to Sentry and dropped; it never
    aborts the other images.
    """

    def __init__(
        self,
        pool: BrowserPool,
        *,
        concurrency: int = CONCURRENCY,
        max_candidates: int = MAX_CANDIDATES,
        preferred_hosts: list[str] | None = None,
    ):
        self.pool = pool
        self.concurrency = concurrency
        self.max_candidates = max_candidates
        self.preferred_hosts = preferred_hosts

    async def load_vocabularies(self) -> tuple[list[str], list[str]]:
        """Fetch the category and condition vocabularies concurrently."""
        categories, conditions = await asyncio.gather(
            asyncio.to_thread(db.get_types, "category"),
            asyncio.to_thread(db.get_types, "condition"),
        )
        return categories, conditions

    async def process_image_url(
        self,
        image_url: str,
        categories: list[str],
        conditions: list[str],
    ) -> InventoryInfo | None:
        t0 = time.time()
        page = None
        try:
            page = await self.pool.acquire()
            scrape = await search_by_image(page, image_url)
            candidates = scrape.top(self.max_candidates)

            tool = await create_retrieval_tool([c.url for c in candidates])
            extraction = await run_extraction_agent(
                image_url, scrape.candidates, categories, conditions, tool,
            )

            similar_url = find_similar_url(
                extraction.name, extraction.price, candidates, self.preferred_hosts,
            )
            info = InventoryInfo(
                name=extraction.name,
                category=extraction.category,
                condition=extraction.condition,
                price=extraction.price,
                description=extraction.description,
                image_url=image_url,
                similar_url=similar_url,
            )
            logger.info("Processed %s in %.1fs: %r", image_url, time.time() - t0, info.name)
            return info
        except Exception as e:
            sentry_sdk.capture_exception(e)
            logger.exception("Error processing image URL %s", image_url)
            return None
        finally:
            if page is not None:
                try:
                    await self.pool.release(page)
                except Exception:
                    logger.exception("Failed to release page for %s", image_url)

    async def run(self, image_urls: list[str]) -> list[InventoryInfo]:
        """Process all images and return the ones that succeeded.

        Vocabulary lookups happen once up front; if they fail the whole run
        fails, since no image can be categorised without them.
        """
        categories, conditions = await self.load_vocabularies()
        logger.info(
            "Inventory run: %d images, %d categories, %d conditions",
            len(image_urls), len(categories), len(conditions),
        )

        sem = asyncio.Semaphore(self.concurrency)

        async def _limited(url: str) -> InventoryInfo | None:
            async with sem:
                return await self.process_image_url(url, categories, conditions)

        results = await asyncio.gather(*[_limited(url) for url in image_urls])
        items = [r for r in results if r is not None]
        logger.info("Inventory run complete: %d/%d images produced items", len(items), len(image_urls))
        return items

    inventory_agent = run
