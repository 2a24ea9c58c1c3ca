from .schemas import (
    CandidateListing,
    ExtractionResult,
    InventoryFields,
    InventoryInfo,
    InventoryRow,
    ScrapeResult,
)

__all__ = [
    "CandidateListing",
    "ExtractionResult",
    "InventoryFields",
    "InventoryInfo",
    "InventoryRow",
    "ScrapeResult",
]
