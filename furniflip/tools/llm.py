"""OpenAI client: chat completions with tools, and text embeddings."""

import logging

from openai import AsyncOpenAI

from ..config import EMBEDDING_BATCH_SIZE, EMBEDDING_MODEL, MODEL_NAME, OPENAI_API_KEY, OPENAI_BASE_URL

logger = logging.getLogger(__name__)

_client: AsyncOpenAI | None = None


def get_client() -> AsyncOpenAI:
    global _client
    if _client is None:
        _client = AsyncOpenAI(api_key=OPENAI_API_KEY, base_url=OPENAI_BASE_URL, timeout=120.0)
    return _client


def image_content_part(image_url: str, detail: str = "high") -> dict:
    """Build an image_url content part for a vision prompt."""
    return {"type": "image_url", "image_url": {"url": image_url, "detail": detail}}


async def chat(
    messages: list[dict],
    *,
    tools: list[dict] | None = None,
    response_format: dict | None = None,
    temperature: float = 0,
):
    """Call the chat model once. Returns the first choice's message."""
    kwargs: dict = {}
    if tools:
        kwargs["tools"] = tools
    if response_format:
        kwargs["response_format"] = response_format

    resp = await get_client().chat.completions.create(
        model=MODEL_NAME,
        messages=messages,
        temperature=temperature,
        **kwargs,
    )
    return resp.choices[0].message


async def embed_texts(texts: list[str], batch_size: int = EMBEDDING_BATCH_SIZE) -> list[list[float]]:
    """Embed texts in requests of at most ``batch_size`` inputs.

    Returns one vector per input, in order.
    """
    vectors: list[list[float]] = []
    for start in range(0, len(texts), batch_size):
        batch = texts[start:start + batch_size]
        resp = await get_client().embeddings.create(model=EMBEDDING_MODEL, input=batch)
        vectors.extend(item.embedding for item in sorted(resp.data, key=lambda d: d.index))
    logger.debug("Embedded %d texts with %s", len(texts), EMBEDDING_MODEL)
    return vectors
