"""Bounded retry policy for calls to the extraction service."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field

import requests

from smsbook.core.errors import PermanentRequestError, TransientRequestError
from smsbook.core.utils import get_logger, truncate

logger = get_logger("sms-ledger.retry")

MAX_ERROR_BODY_LOG_LEN = 200


def linear_backoff(attempt: int) -> float:
    """Seconds to wait after the given (1-based) failed attempt."""
    return attempt * 2.0


def is_retryable_status(status_code: int) -> bool:
    """Server errors and rate limiting are worth another attempt."""
    return status_code == 429 or 500 <= status_code < 600


@dataclass(frozen=True)
class RetryPolicy:
    """How many attempts to make, how long to wait between them, and which statuses to retry."""

    max_attempts: int = 3
    backoff: Callable[[int], float] = field(default=linear_backoff)
    retryable_status: Callable[[int], bool] = field(default=is_retryable_status)

    def delay(self, attempt: int) -> float:
        """Seconds to sleep after a failed attempt."""
        return self.backoff(attempt)


def send_with_retry(
    send: Callable[[], requests.Response],
    policy: RetryPolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> requests.Response:
    """Call ``send`` until it returns a 2xx response or the policy gives up.

    Timeouts and retryable statuses are retried; any other non-2xx status or a connection failure raises
    ``PermanentRequestError`` immediately. Running out of attempts raises ``TransientRequestError``.
    """
    last_reason = "no attempts made"
    for attempt in range(1, policy.max_attempts + 1):
        try:
            response = send()
        except requests.Timeout as exc:
            last_reason = f"timeout: {exc}"
            logger.warning(f"Attempt {attempt}/{policy.max_attempts} timed out")
        except requests.RequestException as exc:
            msg = f"Request failed: {exc}"
            logger.error(msg)
            raise PermanentRequestError(msg) from exc
        else:
            if 200 <= response.status_code < 300:
                return response
            body = truncate(response.text or "", MAX_ERROR_BODY_LOG_LEN)
            if not policy.retryable_status(response.status_code):
                msg = f"Extraction service returned {response.status_code}: {body}"
                logger.error(msg)
                raise PermanentRequestError(msg, status_code=response.status_code)
            last_reason = f"status {response.status_code}"
            logger.warning(f"Attempt {attempt}/{policy.max_attempts} got {response.status_code}: {body}")
        if attempt < policy.max_attempts:
            delay = policy.delay(attempt)
            logger.info(f"Retrying in {delay:.0f}s")
            sleep(delay)
    msg = f"Extraction service unavailable after {policy.max_attempts} attempts ({last_reason})"
    logger.error(msg)
    raise TransientRequestError(msg)
