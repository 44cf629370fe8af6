"""Retry decorators for asset fetches."""

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    before_sleep_log,
)
import logging

import requests

from ..config import settings

logger = logging.getLogger(__name__)


class RetryableHTTPError(requests.HTTPError):
    """HTTP status worth retrying (5xx, 429)."""


RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

# Asset fetch retry decorator
asset_retry = retry(
    retry=retry_if_exception_type(
        (requests.ConnectionError, requests.Timeout, RetryableHTTPError)
    ),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
    stop=stop_after_attempt(settings.http_max_attempts),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
