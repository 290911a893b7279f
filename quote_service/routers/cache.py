"""
缓存管理路由
GET  /api/cache/stats     - 缓存统计
"""

from fastapi import APIRouter

from quote_service.services.quote_service import get_quote_service

router = APIRouter(prefix="/api/cache", tags=["缓存管理"])


@router.get("/stats")
async def cache_stats():
    """获取缓存统计信息（后端、TTL、条目数）"""
    return {"success": True, "data": await get_quote_service().cache.stats()}
