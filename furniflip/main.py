"""FurniFlip — inventory API."""

import logging

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import Depends, FastAPI, Header, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from .config import SENTRY_DSN
from .errors import FurniFlipError
from .models.schemas import AnalyzeRequest, AnalyzeResponse, CatalogResponse
from .tools.browser_pool import BrowserPool
from .workflow.catalog import create_catalog
from .workflow.inventory import InventoryAgent

logger = logging.getLogger(__name__)

if SENTRY_DSN:
    sentry_sdk.init(dsn=SENTRY_DSN)


@asynccontextmanager
async def lifespan(app: FastAPI):
    pool = BrowserPool()
    await pool.start()
    app.state.agent = InventoryAgent(pool)
    try:
        yield
    finally:
        await pool.stop()


app = FastAPI(title="FurniFlip", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

API_PREFIX = "/api/v1/core"


def get_agent(request: Request) -> InventoryAgent:
    agent = getattr(request.app.state, "agent", None)
    if agent is None:
        raise HTTPException(status_code=503, detail="Inventory agent not ready")
    return agent


def bearer_token(authorization: str | None = Header(default=None)) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    return authorization.split(" ", 1)[1].strip()


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@app.get("/health")
async def health():
    return {"status": "ok", "service": "furniflip"}


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------

@app.post(f"{API_PREFIX}/inventory/create", response_model=CatalogResponse)
async def create_inventory_catalog(
    files: list[UploadFile],
    token: str = Depends(bearer_token),
    agent: InventoryAgent = Depends(get_agent),
):
    contents = [await f.read() for f in files]
    try:
        return await create_catalog(token, contents, agent)
    except FurniFlipError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@app.post(f"{API_PREFIX}/inventory/analyze", response_model=AnalyzeResponse)
async def analyze_inventory(body: AnalyzeRequest, agent: InventoryAgent = Depends(get_agent)):
    try:
        items = await agent.run(body.image_urls)
    except Exception as e:
        logger.exception("Inventory analysis failed")
        raise HTTPException(status_code=502, detail=f"Inventory analysis failed: {e}")
    return AnalyzeResponse(items=items)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=3000)
