"""上游请求重试策略：仅对限流状态做指数退避"""

from typing import FrozenSet

from pydantic import BaseModel, ConfigDict, Field

from quote_service.config import settings


class RetryPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=0.5, ge=0)
    multiplier: float = Field(default=2.0, ge=1)
    retryable_statuses: FrozenSet[int] = frozenset({429})

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            base_delay=settings.RETRY_BASE_DELAY,
            multiplier=settings.RETRY_BACKOFF_MULTIPLIER,
        )

    def is_retryable(self, status_code: int) -> bool:
        return status_code in self.retryable_statuses

    def delay(self, attempt: int) -> float:
        """第 attempt 次（从 0 开始）失败后的等待秒数：0.5, 1.0, 2.0, ..."""
        return self.base_delay * (self.multiplier ** attempt)

    def should_retry(self, status_code: int, attempt: int) -> bool:
        return self.is_retryable(status_code) and attempt < self.max_attempts - 1
