"""
统一错误类型
每个错误携带稳定的 kind 字符串与 HTTP 状态码，由 main.py 的异常处理器转换为
{"error": kind, "detail": ...} 响应。
"""

from typing import Any, Dict, Optional


class QuoteServiceError(Exception):
    """行情服务错误基类"""

    kind: str = "internal_error"
    status_code: int = 500

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.kind)
        self.detail = detail

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.kind}
        if self.detail:
            payload["detail"] = self.detail
        return payload


class ConfigError(QuoteServiceError):
    """缺少上游访问凭证，不重试"""

    kind = "config_error"
    status_code = 500


class ValidationError(QuoteServiceError):
    """代码列表为空或无效，由调用方修正"""

    kind = "validation_error"
    status_code = 400


class RateLimited(QuoteServiceError):
    """上游持续限流且重试次数已耗尽"""

    kind = "rate_limit"
    status_code = 429


class UpstreamUnavailable(QuoteServiceError):
    """传输失败、响应体异常或上游返回非限流错误状态"""

    kind = "upstream_error"
    status_code = 502
