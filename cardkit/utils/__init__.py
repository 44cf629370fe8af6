"""Utility modules for cardkit."""

from .logging_config import get_logger, setup_logging
from .retry import RetryableHTTPError, asset_retry

__all__ = ["get_logger", "setup_logging", "asset_retry", "RetryableHTTPError"]
