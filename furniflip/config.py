"""Configuration and environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from furniflip/)
load_dotenv(Path(__file__).parent.parent / ".env")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    return float(raw) if raw else default


# --- API Keys ---
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL") or None
SENTRY_DSN = os.getenv("SENTRY_DSN", "")

# --- OpenAI Models ---
MODEL_NAME = os.getenv("MODEL_NAME", "gpt-4o")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
# The embeddings endpoint caps inputs per request at 2048
EMBEDDING_BATCH_SIZE = 512
STRUCTURED_OUTPUT =os.getenv("STRUCTURED_OUTPUT", "false").lower() == "true"

# --- Supabase ---
SUPABASE_URL = os.getenv("SUPABASE_URL", "http://127.0.0.1:54321")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
INVENTORY_BUCKET = "inventory"

# --- Tier limits (items per seller) ---
FREE_INVENTORY_LIMIT = _float_env("FREE_INVENTORY_LIMIT", 10)
BASIC_INVENTORY_LIMIT = _float_env("BASIC_INVENTORY_LIMIT", 100)

# --- Browser ---
ENVIRONMENT = os.getenv("ENVIRONMENT", "production")
CHROME_PATH = os.getenv("CHROME_PATH") or None
BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
]

# --- Pipeline ---
MAX_PAGES = 5
CONCURRENCY = 5
FETCH_CONCURRENCY = 5
MAX_CANDIDATES = 20
LENS_TIMEOUT_S = 30.0
FETCH_TIMEOUT_S = 5.0
CHUNK_SIZE = 500
CHUNK_OVERLAP = 50
RETRIEVAL_TOP_K = 4
MAX_AGENT_TURNS = 8

# Marketplace hosts whose listings make the best "similar item" references
PREFERRED_HOSTS = [
    h.strip()
    for h in os.getenv(
        "PREFERRED_HOSTS",
        "wayfair.com,ikea.com,amazon.com,target.com,walmart.com,westelm.com,potterybarn.com,crateandbarrel.com",
    ).split(",")
    if h.strip()
]
