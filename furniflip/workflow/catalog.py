"""Catalog creation: uploaded photos → priced inventory rows for a seller."""

import asyncio
import logging
import math

from .. import db
from ..config import BASIC_INVENTORY_LIMIT, FREE_INVENTORY_LIMIT
from ..errors import CatalogError, FurniFlipError, InventoryLimitError
from ..models.schemas import InventoryInfo, InventoryRow
from ..tools.images import convert_to_jpeg, jpeg_filename
from .inventory import InventoryAgent
from .matching import parse_price

logger = logging.getLogger(__name__)


def tier_limit(tier: str) -> float:
    """Max inventory items for a subscription tier. Paid tiers above basic are unlimited."""
    tier = tier.lower()
    if tier == "free":
        return FREE_INVENTORY_LIMIT
    if tier == "basic":
        return BASIC_INVENTORY_LIMIT
    return math.inf


def check_limit(seller_id: str, adding: int) -> None:
    tier = db.get_user_tier(seller_id)
    limit = tier_limit(tier)
    current = db.count_inventory(seller_id)
    if current + adding > limit:
        raise InventoryLimitError(tier, limit, current)


def upload_image(data: bytes) -> str:
    return db.upload_to_storage(jpeg_filename(), convert_to_jpeg(data))


def prepare_rows(items: list[InventoryInfo], catalog_id: str, seller_id: str) -> list[InventoryRow]:
    return [
        InventoryRow(
            title=item.name,
            price=parse_price(item.price),
            category=item.category,
            image_url=item.image_url,
            similar_url=item.similar_url,
            condition=item.condition,
            description=item.description,
            catalog_id=catalog_id,
            seller_id=seller_id,
        )
        for item in items
    ]


def insert_rows(rows: list[InventoryRow]) -> list[dict]:
    """Insert rows one at a time, re-checking the seller's limit before each."""
    inserted: list[dict] = []
    for row in rows:
        check_limit(row.seller_id, 1)
        inserted.append(db.insert_inventory_row(row.model_dump()))
    return inserted


async def create_catalog(token: str, files: list[bytes], agent: InventoryAgent) -> dict:
    """Run the full catalog flow for the seller behind ``token``.

    1. Resolve the user and enforce their tier's inventory limit
    2. Create the catalog row
    3. Convert uploads to JPEG and push them to storage
    4. Run the inventory pipeline over the public URLs
    5. Price and insert the inventory rows

    The catalog row is deleted again if any step after its creation fails.

    Returns:
        ``{"catalog_id": ..., "inventory": [inserted rows]}``
    """
    catalog: dict | None = None
    try:
        user = await asyncio.to_thread(db.get_user, token)
        await asyncio.to_thread(check_limit, user.id, len(files))

        catalog = await asyncio.to_thread(db.create_catalog, user.id)
        logger.info("Created catalog %s for seller %s (%d photos)", catalog["id"], user.id, len(files))

        image_urls = await asyncio.gather(*[asyncio.to_thread(upload_image, f) for f in files])
        items = await agent.run(list(image_urls))

        rows = prepare_rows(items, catalog["id"], user.id)
        inventory = await asyncio.to_thread(insert_rows, rows)
        return {"catalog_id": catalog["id"], "inventory": inventory}

    except Exception as e:
        logger.error("Error in create_catalog: %s", e)
        if catalog and catalog.get("id"):
            try:
                await asyncio.to_thread(db.delete_catalog, catalog["id"])
            except Exception:
                logger.exception("Failed to roll back catalog %s", catalog["id"])
        if isinstance(e, InventoryLimitError):
            raise
        status = e.status_code if isinstance(e, FurniFlipError) else None
        raise CatalogError(f"Failed to create catalog: {e}", status) from e
