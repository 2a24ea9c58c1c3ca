"""Pydantic models for the FurniFlip inventory pipeline."""

from pydantic import BaseModel, ConfigDict, Field

INVENTORY_FIELDS = ("name", "category", "condition", "price", "description")


# --- Scraping ---


class CandidateListing(BaseModel):
    """One visual-search match. Only listings with a currency price are kept."""

    title: str
    url: str
    price: str = Field(description="Price as displayed, e.g. '$149.99'")


class ScrapeResult(BaseModel):
    image_url: str
    candidates: list[CandidateListing] = Field(default_factory=list)

    def top(self, n: int) -> list[CandidateListing]:
        """First ``n`` candidates, in the search engine's relevance order."""
        return self.candidates[:n]


# --- Extraction ---


class InventoryFields(BaseModel):
    """Schema the model fills in when structured output is enabled."""

    model_config = ConfigDict(extra="forbid")

    name: str
    category: str
    condition: str
    price: str
    description: str


class ExtractionResult(BaseModel):
    """Fields extracted from the agent's final answer.

    Absent fields are kept as empty strings and listed in ``missing`` so a
    partial extraction is visible to callers instead of passing silently.
    """

    name: str = ""
    category: str = ""
    condition: str = ""
    price: str = ""
    description: str = ""
    missing: list[str] = Field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.missing)

    @classmethod
    def from_fields(cls, fields: dict[str, str]) -> "ExtractionResult":
        values = {key: fields.get(key) or "" for key in INVENTORY_FIELDS}
        missing = [key for key in INVENTORY_FIELDS if not values[key]]
        return cls(**values, missing=missing)


# --- Pipeline output ---


class InventoryInfo(BaseModel):
    """Pipeline output for one successfully processed image."""

    model_config = ConfigDict(frozen=True)

    name: str
    category: str
    condition: str
    price: str
    description: str
    image_url: str
    similar_url: str = ""


class InventoryRow(BaseModel):
    """Row written to the ``inventory`` table."""

    title: str
    price: float | None = None
    category: str
    image_url: str
    similar_url: str
    condition: str
    description: str
    catalog_id: str
    seller_id: str


# --- API ---


class AnalyzeRequest(BaseModel):
    image_urls: list[str] = Field(min_length=1, max_length=50)


class AnalyzeResponse(BaseModel):
    items: list[InventoryInfo]


class CatalogResponse(BaseModel):
    catalog_id: str
    inventory: list[dict]
