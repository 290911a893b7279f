"""
行情查询路由
GET /api/quotes?symbols=AAPL;MSFT   - 获取一批代码的最新快照与批内评分
"""

from fastapi import APIRouter, Query

from quote_service.models.response import ErrorResponse, QuotesResponse
from quote_service.services.quote_service import get_quote_service

router = APIRouter(prefix="/api/quotes", tags=["行情"])


@router.get(
    "",
    response_model=QuotesResponse,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def get_quotes(
    symbols: str = Query(default="", description="以 ; 或 , 分隔的代码列表"),
):
    """获取行情快照；错误由全局 QuoteServiceError 处理器统一转换"""
    return await get_quote_service().get_quotes(symbols)
