"""
行情聚合服务配置模块
支持从环境变量与 .env 读取配置
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class QuoteServiceSettings(BaseSettings):
    """行情聚合服务配置"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── 基础配置 ──────────────────────────────────────────
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8001)
    DEBUG: bool = Field(default=False)
    ALLOWED_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"]
    )

    # ── Redis 配置（可选缓存后端） ─────────────────────────
    REDIS_HOST: str = Field(default="localhost")
    REDIS_PORT: int = Field(default=6379)
    REDIS_PASSWORD: str = Field(default="")
    REDIS_DB: int = Field(default=0)
    REDIS_ENABLED: bool = Field(default=False)
    REDIS_MAX_CONNECTIONS: int = Field(default=20)

    @property
    def REDIS_URL(self) -> str:
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # ── 上游数据源（Marketstack） ───────────────────────────
    MARKETSTACK_KEY: str = Field(default="")
    MARKETSTACK_BASE_URL: str = Field(default="http://api.marketstack.com/v1")
    UPSTREAM_TIMEOUT: float = Field(default=10.0)   # 传输层超时（秒）

    # ── 重试策略（仅针对限流响应） ──────────────────────────
    RETRY_MAX_ATTEMPTS: int = Field(default=3)
    RETRY_BASE_DELAY: float = Field(default=0.5)     # 首次退避（秒）
    RETRY_BACKOFF_MULTIPLIER: float = Field(default=2.0)

    # ── 缓存配置 ──────────────────────────────────────────
    QUOTE_CACHE_TTL: int = Field(default=300)        # 行情快照 TTL（秒）

    # ── 日志配置 ──────────────────────────────────────────
    LOG_LEVEL: str = Field(default="INFO")

    @property
    def credential_configured(self) -> bool:
        return bool(self.MARKETSTACK_KEY.strip())


@lru_cache
def get_settings() -> QuoteServiceSettings:
    """获取全局配置（单例）"""
    return QuoteServiceSettings()


settings = get_settings()
