"""统一 API 响应模型"""

from typing import List, Optional

from pydantic import BaseModel

from quote_service.models.quote import ScoredRecord


class QuotesResponse(BaseModel):
    """行情查询成功响应"""
    cached: bool = False
    data: List[ScoredRecord] = []

    @classmethod
    def ok(cls, data: List[ScoredRecord], cached: bool = False) -> "QuotesResponse":
        return cls(cached=cached, data=list(data))


class ErrorResponse(BaseModel):
    """行情查询失败响应"""
    error: str
    detail: Optional[str] = None
