"""
Layer 2 – 缓存层
以规范化代码集合为键缓存整批评分结果，按 TTL 逻辑过期。
后端：Redis（启用且可连接时） → 进程内字典
"""

import json
import logging
import time
from typing import Callable, Dict, Optional, Protocol, Sequence

from redis.asyncio import Redis

from quote_service.config import settings
from quote_service.db import get_redis
from quote_service.models.quote import CacheEntry, ScoredRecord

logger = logging.getLogger(__name__)

_NAMESPACE = "quotes"


def _make_key(namespace: str, key: str) -> str:
    """生成 Redis 键"""
    return f"{namespace}:{key}"


class QuoteCache(Protocol):
    async def get(self, key: str) -> Optional[CacheEntry]: ...

    async def put(self, key: str, payload: Sequence[ScoredRecord]) -> CacheEntry: ...

    async def stats(self) -> dict: ...


class MemoryTTLCache:
    """进程内缓存。过期条目在读取时视为缺失并顺带删除，不做主动清理"""

    def __init__(self, ttl_seconds: float = None, clock: Callable[[], float] = time.monotonic):
        self._ttl = settings.QUOTE_CACHE_TTL if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    async def get(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self._ttl:
            self._entries.pop(key, None)
            logger.debug(f"缓存过期: {key}")
            return None
        logger.debug(f"缓存命中（内存）: {key}")
        return entry

    async def put(self, key: str, payload: Sequence[ScoredRecord]) -> CacheEntry:
        entry = CacheEntry(key=key, timestamp=self._clock(), payload=tuple(payload))
        self._entries[key] = entry
        logger.debug(f"缓存写入（内存）: {key}")
        return entry

    async def stats(self) -> dict:
        return {"backend": "memory", "ttl": self._ttl, "entries": len(self._entries)}


class RedisTTLCache:
    """Redis 缓存。SETEX 负责物理过期，读取时仍按写入时间戳校验 TTL"""

    def __init__(
        self,
        redis: Redis,
        ttl_seconds: float = None,
        clock: Callable[[], float] = time.time,
    ):
        self._redis = redis
        self._ttl = settings.QUOTE_CACHE_TTL if ttl_seconds is None else ttl_seconds
        self._clock = clock

    @property
    def ttl(self) -> float:
        return self._ttl

    async def get(self, key: str) -> Optional[CacheEntry]:
        try:
            raw = await self._redis.get(_make_key(_NAMESPACE, key))
        except Exception as exc:
            logger.warning(f"Redis 读取失败，按未命中处理: {exc}")
            return None
        if not raw:
            return None
        try:
            doc = json.loads(raw)
            entry = CacheEntry(
                key=key,
                timestamp=doc["timestamp"],
                payload=tuple(ScoredRecord.model_validate(item) for item in doc["payload"]),
            )
        except (ValueError, KeyError, TypeError) as exc:
            # pydantic ValidationError 与 JSONDecodeError 均为 ValueError 子类
            logger.warning(f"Redis 缓存条目无法解析，按未命中处理: {key}: {exc}")
            return None
        if self._clock() - entry.timestamp >= self._ttl:
            return None
        logger.debug(f"缓存命中（Redis）: {key}")
        return entry

    async def put(self, key: str, payload: Sequence[ScoredRecord]) -> CacheEntry:
        entry = CacheEntry(key=key, timestamp=self._clock(), payload=tuple(payload))
        serialized = json.dumps({
            "timestamp": entry.timestamp,
            "payload": [r.model_dump(by_alias=True) for r in entry.payload],
        })
        try:
            await self._redis.setex(_make_key(_NAMESPACE, key), max(1, int(self._ttl)), serialized)
            logger.debug(f"缓存写入（Redis）: {key}")
        except Exception as exc:
            logger.warning(f"Redis 写入失败: {exc}")
        return entry

    async def stats(self) -> dict:
        try:
            count = 0
            async for _ in self._redis.scan_iter(match=_make_key(_NAMESPACE, "*")):
                count += 1
            return {"backend": "redis", "ttl": self._ttl, "entries": count}
        except Exception as exc:
            return {"backend": "redis", "ttl": self._ttl, "status": "error", "error": str(exc)}


def build_cache() -> QuoteCache:
    """Redis 可用时使用 Redis，否则降级为进程内缓存"""
    redis = get_redis()
    if redis is not None:
        return RedisTTLCache(redis)
    return MemoryTTLCache()
