"""Exception types raised by the inventory pipeline and catalog flow."""

from __future__ import annotations


class FurniFlipError(Exception):
    """Base exception. Routes map ``status_code`` onto the HTTP response."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BrowserUnavailableError(FurniFlipError):
    """The shared headless browser failed to start or was already stopped."""


class LensError(FurniFlipError):
    """Reverse image search navigation timed out or the result layout is missing."""

    status_code = 502


class AgentError(FurniFlipError):
    """The extraction agent produced no usable answer."""

    status_code = 502


class ImageConversionError(FurniFlipError):
    status_code = 400


class AuthenticationError(FurniFlipError):
    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


class InventoryLimitError(FurniFlipError):
    """Seller would exceed the inventory limit of their subscription tier."""

    status_code = 403

    def __init__(self, tier: str, limit: float, current: int):
        super().__init__(
            f"User with tier {tier} is limited to {limit:g} items in inventory. Current count: {current}"
        )
        self.tier = tier
        self.limit = limit
        self.current = current


class CatalogError(FurniFlipError):
    """Catalog creation failed; the catalog row has been rolled back."""
