# storefront/utils/retry.py
import redis
import requests
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _log_retry(state: RetryCallState) -> None:
    error = state.outcome.exception() if state.outcome else None
    logger.warning(f"{state.fn.__qualname__} attempt {state.attempt_number} failed ({error}), retrying")


def http_retry(attempts: int = 3):
    # tylko bledy transportu (polaczenie, timeout), odpowiedzi 4xx/5xx nie sa ponawiane
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        before_sleep=_log_retry,
    )


def redis_retry(attempts: int = 3):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
        before_sleep=_log_retry,
    )
