"""Retry configuration settings."""

from dataclasses import dataclass

from secret_migrate import config as settings


@dataclass
class RetryConfiguration:
    """Backoff settings for secret store reads.

    Attributes:
        max_attempts: Maximum number of attempts including the first (default: 3)
        base_delay: Initial delay in seconds between attempts (default: 1.0)
        max_delay: Maximum delay cap in seconds (default: 30.0)
        exponential_base: Base for exponential backoff multiplier (default: 2.0)
        jitter: Random jitter added to delay in seconds (default: 0.5)
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    jitter: float = 0.5

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay <= 0:
            raise ValueError(f"base_delay must be > 0, got {self.base_delay}")
        if self.max_delay < self.base_delay:
            raise ValueError(
                f"max_delay must be >= base_delay ({self.base_delay}), got {self.max_delay}"
            )
        if self.exponential_base < 1:
            raise ValueError(f"exponential_base must be >= 1, got {self.exponential_base}")
        if self.jitter < 0:
            raise ValueError(f"jitter must be >= 0, got {self.jitter}")

    @classmethod
    def from_env(cls) -> "RetryConfiguration":
        """Build configuration from the STORE_RETRY_* environment settings."""
        return cls(
            max_attempts=settings.STORE_RETRY_MAX_ATTEMPTS,
            base_delay=settings.STORE_RETRY_BASE_DELAY,
            max_delay=settings.STORE_RETRY_MAX_DELAY,
        )
