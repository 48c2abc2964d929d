"""Retry wrapper for calls to remote functions.

A call is retried on retryable HTTP statuses and on transport errors with
exponential backoff and a little jitter. The wrapper never raises: the
outcome is a RetryResult holding either data or an error.
"""

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, FrozenSet, Optional

import requests

logger = logging.getLogger(__name__)


@dataclass
class RetryOptions:
    max_retries: int = 3
    initial_delay: float = 0.5
    max_delay: float = 10.0
    backoff_factor: float = 2.0
    retryable_statuses: FrozenSet[int] = field(default_factory=lambda: frozenset({429, 500, 502, 503, 504}))
    max_jitter: float = 0.2


@dataclass
class RemoteError:
    message: str
    status: Optional[int] = None


@dataclass
class RetryResult:
    data: Any = None
    error: Optional[RemoteError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def backoff_delay(attempt: int, options: RetryOptions, jitter: Optional[float] = None) -> float:
    """Delay in seconds before retry number attempt + 1."""
    if jitter is None:
        jitter = random.random() * options.max_jitter
    return min(options.initial_delay * options.backoff_factor ** attempt + jitter, options.max_delay)


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get('error'):
        return str(body['error'])
    return f"HTTP {response.status_code}"


def invoke_with_retry(func: Callable[..., requests.Response], *args,
                      options: Optional[RetryOptions] = None,
                      sleep: Callable[[float], None] = time.sleep, **kwargs) -> RetryResult:
    """Call func(*args, **kwargs), which returns a requests.Response, with retries.

    Args:
        func: Remote call, e.g. functools.partial(session.post, url).
        options: Retry policy; defaults to RetryOptions().
        sleep: Injected for tests.

    Returns:
        RetryResult with the decoded JSON body as data, or an error holding
        the last status and message.
    """
    options = options or RetryOptions()
    last_error = RemoteError("Unknown error")

    for attempt in range(options.max_retries + 1):
        try:
            response = func(*args, **kwargs)
        except requests.RequestException as e:
            last_error = RemoteError(str(e))
        else:
            if response.ok:
                try:
                    return RetryResult(data=response.json())
                except ValueError:
                    return RetryResult(data=response.text)
            last_error = RemoteError(_error_message(response), response.status_code)
            if response.status_code not in options.retryable_statuses:
                return RetryResult(error=last_error)

        if attempt < options.max_retries:
            delay = backoff_delay(attempt, options)
            logger.warning("Remote call failed (attempt %d/%d): %s. Retrying in %.2fs",
                           attempt + 1, options.max_retries + 1, last_error.message, delay)
            sleep(delay)

    logger.error("Remote call failed after %d attempts: %s", options.max_retries + 1, last_error.message)
    return RetryResult(error=last_error)
