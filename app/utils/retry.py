# app/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import requests

from app.utils.settings import (
    PRODUCT_SERVICE_RETRIES,
    PRODUCT_SERVICE_BACKOFF_MIN,
    PRODUCT_SERVICE_BACKOFF_MAX,
)


def http_retry(
    attempts: int = PRODUCT_SERVICE_RETRIES,
    backoff_min: float = PRODUCT_SERVICE_BACKOFF_MIN,
    backoff_max: float = PRODUCT_SERVICE_BACKOFF_MAX,
):
    """Retry na wyjatkach requests (transport, 4xx/5xx poza 404). Parametry z settings."""
    return retry(
        reraise=True,
        stop=stop_after_attempt(max(attempts, 1)),
        wait=wait_exponential(multiplier=backoff_min, min=backoff_min, max=backoff_max),
        retry=retry_if_exception_type(requests.RequestException),
    )
