"""
Layer 1 – 数据获取层
向 Marketstack 发起单次分组请求（全部代码逗号拼接，limit=1 取最新一条日线），
仅对限流响应按 RetryPolicy 指数退避重试。
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

import httpx
from pydantic import ValidationError as SchemaError

from quote_service.config import settings
from quote_service.errors import RateLimited, UpstreamUnavailable
from quote_service.layers.retry import RetryPolicy
from quote_service.layers.symbols import SymbolSet
from quote_service.models.quote import EodResponse, UpstreamRecord

logger = logging.getLogger(__name__)

_HTTP_NOT_FOUND = 404


class MarketstackClient:
    """上游行情客户端：一次调用对应一次分组请求（重试除外）"""

    def __init__(
        self,
        api_key: str = None,
        base_url: str = None,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._api_key = settings.MARKETSTACK_KEY if api_key is None else api_key
        self._base_url = (base_url or settings.MARKETSTACK_BASE_URL).rstrip("/")
        self._policy = retry_policy or RetryPolicy.from_settings()
        self._timeout = settings.UPSTREAM_TIMEOUT if timeout is None else timeout
        self._transport = transport
        self._sleep = sleep
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._policy

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout, connect=5.0),
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ── 请求 ──────────────────────────────────────────────

    async def _get_with_retry(self, params: dict) -> httpx.Response:
        client = self._get_client()
        url = f"{self._base_url}/eod"
        attempt = 0
        while True:
            resp = await client.get(url, params=params)
            if resp.is_success or resp.status_code == _HTTP_NOT_FOUND:
                return resp
            if not self._policy.should_retry(resp.status_code, attempt):
                return resp
            delay = self._policy.delay(attempt)
            logger.warning(
                f"上游限流（HTTP {resp.status_code}），{delay:.2f}s 后重试 "
                f"[{attempt + 1}/{self._policy.max_attempts - 1}]"
            )
            await self._sleep(delay)
            attempt += 1

    async def fetch_batch(self, symbols: SymbolSet) -> List[UpstreamRecord]:
        """
        获取一批代码的最新日线记录

        Raises:
            RateLimited: 重试耗尽后仍被限流
            UpstreamUnavailable: 传输错误、响应体异常或其它错误状态
        """
        params = {
            "access_key": self._api_key,
            "symbols": ",".join(symbols.symbols),
            "limit": 1,
        }
        try:
            resp = await self._get_with_retry(params)
        except httpx.HTTPError as exc:
            logger.error(f"上游请求失败: {exc!r}")
            raise UpstreamUnavailable(f"Transport error: {exc}") from exc

        if resp.status_code == _HTTP_NOT_FOUND:
            logger.info(f"上游未找到记录: {symbols.key}")
            return []

        if not resp.is_success:
            text = resp.text
            if self._policy.is_retryable(resp.status_code):
                logger.error(f"上游限流，重试已耗尽: {text}")
                raise RateLimited(text)
            logger.error(f"上游错误: {resp.status_code} {text}")
            raise UpstreamUnavailable(f"Status {resp.status_code}: {text}")

        try:
            body = EodResponse.model_validate_json(resp.content)
        except SchemaError as exc:
            logger.error(f"上游响应体无法解析: {exc}")
            raise UpstreamUnavailable(f"Malformed upstream response: {exc}") from exc

        records = body.records()
        logger.info(f"上游返回 {len(records)} 条记录（请求 {len(symbols)} 个代码）")
        return records


# ── 模块级别单例 ──────────────────────────────────────────
_acquisition: Optional[MarketstackClient] = None


def get_acquisition_layer() -> MarketstackClient:
    global _acquisition
    if _acquisition is None:
        _acquisition = MarketstackClient()
    return _acquisition


async def close_acquisition_layer() -> None:
    global _acquisition
    if _acquisition is not None:
        await _acquisition.aclose()
        _acquisition = None
