"""Retry policy with exponential backoff."""

from pydantic import BaseModel, Field
from tenacity import wait_exponential

from pages_deployer.settings import Settings


class RetryPolicy(BaseModel):
    """Bounded exponential backoff.

    The delay after attempt ``n`` fails is
    ``base_delay_s * backoff_multiplier ** (n - 1)``, capped at ``max_delay_s``.
    """

    max_attempts: int = Field(default=3, ge=1)
    base_delay_s: float = Field(default=2.0, ge=0)
    max_delay_s: float = Field(default=30.0, ge=0)
    backoff_multiplier: float = Field(default=2.0, ge=1)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.retry_max_attempts,
            base_delay_s=settings.retry_base_delay_s,
            max_delay_s=settings.retry_max_delay_s,
            backoff_multiplier=settings.retry_backoff_multiplier,
        )

    def wait_strategy(self) -> wait_exponential:
        """Tenacity wait strategy implementing this policy."""
        return wait_exponential(
            multiplier=self.base_delay_s,
            exp_base=self.backoff_multiplier,
            min=0,
            max=self.max_delay_s,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay in seconds after ``attempt`` (1-based) has failed."""
        if attempt < 1:
            raise ValueError("attempt is 1-based")
        return min(self.base_delay_s * self.backoff_multiplier ** (attempt - 1), self.max_delay_s)
