"""Exponential backoff around whole export calls.

The core exporter never retries on its own. The OpenTelemetry SDK adapters
wrap each export in ``call_with_retry`` so that transient upload failures
are retried with the configured policy.
"""

import logging
import random
import time
from typing import Callable, TypeVar

from site24x7_exporter.config import RetrySettings
from site24x7_exporter.exceptions import DeliveryError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def call_with_retry(
    fn: Callable[[], T],
    settings: RetrySettings,
    *,
    sleep: Callable[[float], object] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    should_stop: Callable[[], bool] | None = None,
) -> T:
    """Call ``fn`` until it succeeds, retrying retryable delivery errors.

    Only ``DeliveryError`` instances with ``retryable`` set are retried; any
    other exception propagates immediately. The delay doubles after each
    failure (with up to 50% jitter), capped at ``settings.max_interval``.

    Args:
        fn: Zero-argument callable performing one export.
        settings: Backoff policy.
        sleep: Sleep function, replaceable in tests. ``threading.Event.wait``
            works here and lets the caller cut a pending delay short.
        clock: Monotonic clock, replaceable in tests.
        should_stop: Checked after each failure and each delay; once it
            returns True the last failure is raised without another attempt.

    Returns:
        Whatever ``fn`` returns.

    Raises:
        DeliveryError: The last failure once the policy is exhausted or
            ``should_stop`` fires.
    """
    if not settings.enabled:
        return fn()

    deadline = clock() + settings.max_elapsed_time
    delay = settings.initial_interval
    attempt = 1
    while True:
        try:
            return fn()
        except DeliveryError as e:
            if not e.retryable:
                raise
            if should_stop is not None and should_stop():
                logger.warning(f"Export abandoned during shutdown after {attempt} attempt(s): {e}")
                raise
            wait = min(delay, settings.max_interval) * (1 + random.random() / 2)
            if clock() + wait > deadline:
                logger.warning(f"Giving up export after {attempt} attempt(s): {e}")
                raise
            logger.info(f"Export attempt {attempt} failed ({e}), retrying in {wait:.1f}s")
            sleep(wait)
            if should_stop is not None and should_stop():
                logger.warning(f"Export abandoned during shutdown after {attempt} attempt(s): {e}")
                raise
            delay = min(delay * 2, settings.max_interval)
            attempt += 1
