"""Exception types raised across the cardkit package."""

from typing import Optional


class CardkitError(Exception):
    """Base class for cardkit errors."""


class AssetLoadError(CardkitError):
    """A required image could not be fetched or decoded."""

    def __init__(self, url: str, reason: Optional[str] = None):
        self.url = url
        self.reason = reason
        message = f"Failed to load image: {_shorten(url)}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ConfigurationError(CardkitError):
    """Tournament, card or template input could not be used."""


def _shorten(url: str, limit: int = 120) -> str:
    # data: URLs can be megabytes long
    return url if len(url) <= limit else f"{url[:limit]}..."
