"""Per-image retrieval index over the pages behind the visual-search matches.

Each image gets its own in-memory Qdrant collection; nothing is shared
between images or persisted.
"""

from __future__ import annotations

import asyncio
import logging
import uuid

import httpx
from bs4 import BeautifulSoup
from langchain_text_splitters import RecursiveCharacterTextSplitter
from qdrant_client import QdrantClient
from qdrant_client.models import Distance, PointStruct, VectorParams

from ..config import CHUNK_OVERLAP, CHUNK_SIZE, FETCH_CONCURRENCY, FETCH_TIMEOUT_S, RETRIEVAL_TOP_K
from . import llm

logger = logging.getLogger(__name__)

TOOL_NAME = "retrieve_item_information"
TOOL_DESCRIPTION = "Search and return information about an item."
NO_RESULTS = "No information found about this item."

_HEADERS = {"User-Agent": "Mozilla/5.0 (compatible; FurniFlip/1.0)"}


async def _fetch_text(client: httpx.AsyncClient, url: str) -> str:
    resp = await client.get(url)
    resp.raise_for_status()
    soup = BeautifulSoup(resp.text, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return soup.get_text(separator="\n", strip=True)


async def load_document(
    client: httpx.AsyncClient,
    url: str,
    timeout: float = FETCH_TIMEOUT_S,
) -> str | None:
    """Fetch a page's visible text. Failures and timeouts yield None."""
    try:
        return await asyncio.wait_for(_fetch_text(client, url), timeout=timeout)
    except Exception as e:
        logger.warning("Failed to load URL %s: %s", url, str(e) or type(e).__name__)
        return None


class ChunkIndex:
    """In-memory vector index of text chunks."""

    def __init__(self):
        self._qdrant = QdrantClient(":memory:")
        self._collection = f"item_{uuid.uuid4().hex[:12]}"
        self.size = 0

    async def add(self, chunks: list[str]) -> None:
        if not chunks:
            return
        vectors = await llm.embed_texts(chunks)
        if self.size == 0:
            self._qdrant.create_collection(
                collection_name=self._collection,
                vectors_config=VectorParams(size=len(vectors[0]), distance=Distance.COSINE),
            )
        points = [
            PointStruct(id=self.size + i, vector=vector, payload={"text": chunk})
            for i, (chunk, vector) in enumerate(zip(chunks, vectors))
        ]
        self._qdrant.upsert(collection_name=self._collection, points=points)
        self.size += len(points)

    async def search(self, query: str, limit: int = RETRIEVAL_TOP_K) -> list[str]:
        if self.size == 0:
            return []
        [vector] = await llm.embed_texts([query])
        results = self._qdrant.query_points(
            collection_name=self._collection,
            query=vector,
            limit=limit,
            with_payload=True,
        )
        return [p.payload["text"] for p in results.points]


class RetrievalTool:
    """Model-callable search over one image's chunk index."""

    name = TOOL_NAME
    description = TOOL_DESCRIPTION

    def __init__(self, index: ChunkIndex):
        self.index = index

    def spec(self) -> dict:
        """OpenAI function-tool definition."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {
                        "query": {"type": "string", "description": "What to look up about the item"},
                    },
                    "required": ["query"],
                },
            },
        }

    async def run(self, query: str) -> str:
        chunks = await self.index.search(query)
        if not chunks:
            return NO_RESULTS
        return "\n\n".join(chunks)


def split_documents(texts: list[str]) -> list[str]:
    splitter = RecursiveCharacterTextSplitter(chunk_size=CHUNK_SIZE, chunk_overlap=CHUNK_OVERLAP)
    chunks: list[str] = []
    for text in texts:
        chunks.extend(splitter.split_text(text))
    return chunks


async def create_retrieval_tool(
    urls: list[str],
    *,
    fetch_timeout: float = FETCH_TIMEOUT_S,
    concurrency: int = FETCH_CONCURRENCY,
) -> RetrievalTool:
    """Fetch, chunk and embed the candidate pages into a fresh index.

    Pages that fail or time out contribute nothing; this never raises for a
    fetch failure. Embedding errors do propagate.
    """
    sem = asyncio.Semaphore(concurrency)

    async with httpx.AsyncClient(headers=_HEADERS, follow_redirects=True) as client:

        async def _load(url: str) -> str | None:
            async with sem:
                return await load_document(client, url, timeout=fetch_timeout)

        docs = await asyncio.gather(*[_load(url) for url in urls])

    texts = [doc for doc in docs if doc]
    chunks = split_documents(texts)
    logger.info("Indexed %d/%d pages into %d chunks", len(texts), len(urls), len(chunks))

    index = ChunkIndex()
    await index.add(chunks)
    return RetrievalTool(index)
