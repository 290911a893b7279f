"""
行情聚合服务
独立 FastAPI 应用程序入口

启动方式:
    uvicorn quote_service.main:app --host 0.0.0.0 --port 8001
    python -m quote_service.main
"""

import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quote_service import __version__
from quote_service.config import settings
from quote_service.db import init_redis, close_connections
from quote_service.errors import QuoteServiceError
from quote_service.layers.acquisition import close_acquisition_layer
from quote_service.routers import health, quotes, cache
from quote_service.services.quote_service import reset_quote_service

# ── 日志配置 ──────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ── 生命周期管理 ──────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用启动/关闭生命周期钩子"""
    logger.info("=" * 60)
    logger.info(f"🚀 QuoteService v{__version__} 启动中")
    logger.info(f"   Upstream  : {settings.MARKETSTACK_BASE_URL}")
    logger.info(f"   Cache TTL : {settings.QUOTE_CACHE_TTL}s")
    logger.info("=" * 60)

    if not settings.credential_configured:
        logger.warning("⚠️ MARKETSTACK_KEY 未配置，所有行情请求将返回 config_error")

    if await init_redis():
        logger.info("✅ 缓存后端：Redis")
    else:
        logger.info("缓存后端：进程内内存")

    yield

    logger.info("🔄 行情服务正在关闭...")
    await close_acquisition_layer()
    await close_connections()
    reset_quote_service()
    logger.info("✅ 行情服务已关闭")


# ── 应用实例 ──────────────────────────────────────────────
app = FastAPI(
    title="QuoteService 行情聚合服务",
    description=(
        "按代码列表获取最新日线快照并计算批内相对评分：\n"
        "- 📦 单次分组请求上游（Marketstack）\n"
        "- 🔁 限流响应指数退避重试\n"
        "- 🗄️ TTL 缓存（Redis → 内存）\n"
        "- 📈 涨跌幅 / 成交量 z-score 综合评分"
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS 中间件 ───────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── 请求计时中间件 ─────────────────────────────────────────
@app.middleware("http")
async def add_process_time(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    response.headers["X-Process-Time"] = f"{(time.time() - start) * 1000:.1f}ms"
    return response


# ── 异常处理 ──────────────────────────────────────────────
@app.exception_handler(QuoteServiceError)
async def quote_service_error_handler(request: Request, exc: QuoteServiceError):
    logger.warning(f"请求失败 [{exc.kind}]: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"未处理的异常: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "detail": str(exc)},
    )


# ── 注册路由 ──────────────────────────────────────────────
app.include_router(health.router)
app.include_router(quotes.router)
app.include_router(cache.router)


# ── 根路由 ───────────────────────────────────────────────
@app.get("/", include_in_schema=False)
async def root():
    return {
        "service": "QuoteService",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


# ── 直接运行入口 ──────────────────────────────────────────
if __name__ == "__main__":
    uvicorn.run(
        "quote_service.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
