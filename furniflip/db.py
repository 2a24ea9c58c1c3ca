"""Supabase client and helpers for vocabularies, catalogs, inventory and storage."""

from supabase import AuthError, Client, create_client

from .config import INVENTORY_BUCKET, SUPABASE_SERVICE_ROLE_KEY, SUPABASE_URL
from .errors import AuthenticationError

_client: Client | None = None


def get_client() -> Client:
    global _client
    if _client is None:
        _client = create_client(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY)
    return _client


# ---------------------------------------------------------------------------
# Vocabularies
# ---------------------------------------------------------------------------

def get_types(enum_type: str) -> list[str]:
    """Valid values of a Postgres enum ('category' or 'condition'), in declared order."""
    return get_client().rpc("get_types", {"enum_type": enum_type}).execute().data or []


# ---------------------------------------------------------------------------
# Users / profiles
# ---------------------------------------------------------------------------

def get_user(token: str):
    try:
        resp = get_client().auth.get_user(token)
    except AuthError as e:
        raise AuthenticationError(f"Invalid or expired token: {e}") from e
    if resp is None or resp.user is None:
        raise AuthenticationError("Invalid or expired token")
    return resp.user


def get_user_tier(user_id: str) -> str:
    rows = get_client().table("profiles").select("tier").eq("id", user_id).execute().data
    if not rows:
        raise ValueError(f"Profile {user_id} not found")
    return (rows[0].get("tier") or "free").lower()


def count_inventory(seller_id: str) -> int:
    resp = (
        get_client()
        .table("inventory")
        .select("id", count="exact")
        .eq("seller_id", seller_id)
        .execute()
    )
    return resp.count or 0


# ---------------------------------------------------------------------------
# catalogs / inventory
# ---------------------------------------------------------------------------

def create_catalog(seller_id: str) -> dict:
    return get_client().table("catalogs").insert({"seller_id": seller_id}).execute().data[0]


def delete_catalog(catalog_id: str) -> None:
    get_client().table("catalogs").delete().eq("id", catalog_id).execute()


def insert_inventory_row(row: dict) -> dict:
    return get_client().table("inventory").insert(row).execute().data[0]


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

def upload_to_storage(
    path: str,
    data: bytes,
    content_type: str = "image/jpeg",
    bucket: str = INVENTORY_BUCKET,
) -> str:
    client = get_client()
    client.storage.from_(bucket).upload(
        path, data, file_options={"content-type": content_type, "cache-control": "3600", "upsert": "false"},
    )
    url = client.storage.from_(bucket).get_public_url(path)
    if not url:
        raise ValueError(f"No public URL for {bucket}/{path}")
    return url
