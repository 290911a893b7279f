"""
行情聚合服务
串联 规范化 → 缓存 → 上游获取 → 对齐 → 评分 → 写缓存，对外提供统一的快照查询接口
"""

import logging
from typing import Optional

from quote_service.config import QuoteServiceSettings, settings as default_settings
from quote_service.errors import ConfigError
from quote_service.layers.acquisition import MarketstackClient, get_acquisition_layer
from quote_service.layers.analysis import AnalysisLayer, get_analysis_layer
from quote_service.layers.cache import QuoteCache, build_cache
from quote_service.layers.processing import ProcessingLayer, get_processing_layer
from quote_service.layers.symbols import normalize
from quote_service.models.response import QuotesResponse

logger = logging.getLogger(__name__)


class QuoteService:
    """行情快照业务服务"""

    def __init__(
        self,
        settings: Optional[QuoteServiceSettings] = None,
        acquisition: Optional[MarketstackClient] = None,
        cache: Optional[QuoteCache] = None,
        processing: Optional[ProcessingLayer] = None,
        analysis: Optional[AnalysisLayer] = None,
    ):
        self._settings = settings or default_settings
        self._acq = acquisition or get_acquisition_layer()
        self._cache = cache or build_cache()
        self._proc = processing or get_processing_layer()
        self._analysis = analysis or get_analysis_layer()

    @property
    def cache(self) -> QuoteCache:
        return self._cache

    async def get_quotes(self, raw_symbols: str) -> QuotesResponse:
        """
        获取一批代码的最新快照及批内相对评分

        Args:
            raw_symbols: 以 ; 或 , 分隔的代码列表

        Raises:
            ConfigError / ValidationError / RateLimited / UpstreamUnavailable
        """
        if not self._settings.credential_configured:
            raise ConfigError("MARKETSTACK_KEY missing")

        symbols = normalize(raw_symbols)

        cached = await self._cache.get(symbols.key)
        if cached is not None:
            return QuotesResponse.ok(cached.payload, cached=True)

        logger.debug(f"缓存未命中: {symbols.key}")
        upstream = await self._acq.fetch_batch(symbols)
        quotes = self._proc.reconcile(symbols, upstream)
        scored = self._analysis.score(quotes)

        entry = await self._cache.put(symbols.key, scored)
        return QuotesResponse.ok(entry.payload, cached=False)


# ── 模块级别单例 ──────────────────────────────────────────
_quote_service: Optional[QuoteService] = None


def get_quote_service() -> QuoteService:
    global _quote_service
    if _quote_service is None:
        _quote_service = QuoteService()
    return _quote_service


def reset_quote_service() -> None:
    """应用关闭时丢弃单例，下次启动按当时的 Redis 状态重建缓存"""
    global _quote_service
    _quote_service = None
