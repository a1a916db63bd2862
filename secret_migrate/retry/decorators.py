"""Tenacity-based retry decorators for secret store calls."""

from functools import wraps
from typing import Callable, Optional
import logging

import tenacity
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from secret_migrate.store.exceptions import TransientStoreError
from .config import RetryConfiguration

logger = logging.getLogger(__name__)


def get_wait_strategy(config: RetryConfiguration):
    """Create exponential jitter wait strategy from configuration.

    Args:
        config: RetryConfiguration with wait parameters

    Returns:
        Configured wait_exponential_jitter strategy
    """
    return wait_exponential_jitter(
        initial=config.base_delay,
        max=config.max_delay,
        exp_base=config.exponential_base,
        jitter=config.jitter,
    )


def before_sleep_log(retry_state: tenacity.RetryCallState) -> None:
    """Log before each retry attempt."""
    if retry_state.outcome is None:
        return

    exception = retry_state.outcome.exception()
    if exception:
        logger.warning(
            f"Retrying {getattr(retry_state.fn, '__name__', 'store call')} "
            f"(attempt {retry_state.attempt_number}) "
            f"after {type(exception).__name__}: {exception}"
        )


def with_store_retry(config: Optional[RetryConfiguration] = None) -> Callable:
    """Decorator that retries a store call on TransientStoreError.

    Any other exception propagates on the first attempt. When attempts are
    exhausted the last TransientStoreError is re-raised unchanged, so callers
    only ever see the store exception hierarchy.

    Args:
        config: Backoff settings; resolved from the environment at call time
            when omitted.

    Returns:
        Decorator for the store call.

    Examples:
        @with_store_retry()
        def read_payload(store, scope, secret_id):
            return store.access_secret_version(scope, secret_id)
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            effective = config or RetryConfiguration.from_env()
            retrying = retry(
                wait=get_wait_strategy(effective),
                stop=stop_after_attempt(effective.max_attempts),
                retry=retry_if_exception_type(TransientStoreError),
                before_sleep=before_sleep_log,
                reraise=True,
            )
            return retrying(func)(*args, **kwargs)

        return wrapper
    return decorator
