"""Retry helpers for resilient secret store reads with exponential backoff."""

from .config import RetryConfiguration
from .decorators import get_wait_strategy, with_store_retry

__all__ = [
    "RetryConfiguration",
    "get_wait_strategy",
    "with_store_retry",
]
