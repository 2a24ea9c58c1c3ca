"""Pick a "similar listing" link for an extracted item from its visual-search matches."""

import re
from urllib.parse import urlparse

from rapidfuzz import fuzz

from ..config import PREFERRED_HOSTS
from ..models.schemas import CandidateListing

_PRICE_NOISE_RE = re.compile(r"[$€£¥,\s]")


def parse_price(text: str) -> float | None:
    """'$1,299.00' -> 1299.0. Returns None when no number can be read."""
    cleaned = _PRICE_NOISE_RE.sub("", text or "")
    match = re.match(r"^\d+(\.\d+)?", cleaned)
    return float(match.group(0)) if match else None


def is_preferred(url: str, hosts: list[str]) -> bool:
    """True when the URL's host is, or is a subdomain of, an allow-listed host."""
    host = (urlparse(url).hostname or "").lower()
    return any(host == h or host.endswith("." + h) for h in hosts)


def find_similar_url(
    name: str,
    price: str,
    candidates: list[CandidateListing],
    preferred_hosts: list[str] | None = None,
) -> str:
    """Choose the candidate listing that best resembles the item.

    Only candidates priced strictly above ``price`` are considered. A
    preferred-host candidate takes over whenever it beats the running highest
    score; a non-preferred one only while the current pick is non-preferred.
    The scan keeps the first of equal scores. With no qualifying candidate the
    first candidate is returned, or "" when there are none.
    """
    hosts = PREFERRED_HOSTS if preferred_hosts is None else preferred_hosts
    item_price = parse_price(price)
    target = name.lower()

    best_url: str | None = None
    best_preferred = False
    highest = -1.0

    for candidate in candidates:
        candidate_price = parse_price(candidate.price)
        if item_price is None or candidate_price is None or not item_price < candidate_price:
            continue

        similarity = fuzz.ratio(target, candidate.title.lower())
        preferred = is_preferred(candidate.url, hosts)

        if preferred and similarity > highest:
            highest, best_url, best_preferred = similarity, candidate.url, True
        elif best_url is None or (not best_preferred and similarity > highest):
            highest, best_url, best_preferred = similarity, candidate.url, preferred

    if best_url is not None:
        return best_url
    return candidates[0].url if candidates else ""
