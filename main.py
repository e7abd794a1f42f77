"""
本文件用于启动 FastAPI 应用并注册 API 路由、统一异常处理与生命周期任务。
主要函数/类:
- `lifespan`: 应用生命周期管理（初始化数据库、按需启动定时刷新任务）
- `handle_signal_error`: 业务异常 → JSON 错误响应
- `handle_validation_error`: 请求体校验失败 → 400
- `handle_unexpected_error`: 未预期异常 → 500
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.api import api_router
from app.api.deps import settings
from app.core.database import dispose_engine, init_db
from app.core.exceptions import PersistenceError, SignalError
from app.core.logger import configure_logging, setup_logger
from app.services.refresh_service import scheduled_refresh_task

logger = setup_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    输入:
    - `app`: FastAPI 应用实例

    输出:
    - 生命周期上下文（启动后进入、退出时清理）

    作用:
    - 应用启动时初始化数据库；开启 `AUTO_REFRESH_ENABLED` 时启动定时刷新任务
    """

    lifespan_logger = setup_logger("lifespan")
    db_initialized = False
    try:
        await init_db()
        db_initialized = True
    except Exception as e:
        lifespan_logger.error(f"❌ 初始化数据库失败: {e}")
        lifespan_logger.warning("⚠️  系统配置缺失或数据库连接失败，请检查 config.yaml / 环境变量中的 DATABASE_URL")

    refresh_task: Optional[asyncio.Task] = None
    if db_initialized and settings.AUTO_REFRESH_ENABLED:
        refresh_task = asyncio.create_task(scheduled_refresh_task())
    elif not db_initialized:
        lifespan_logger.warning("⚠️ 由于数据库初始化失败，定时刷新任务已跳过启动。")

    yield

    if refresh_task is not None:
        refresh_task.cancel()
        try:
            await refresh_task
        except asyncio.CancelledError:
            pass
    await dispose_engine()


configure_logging()
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG,
)
app.include_router(api_router)


@app.exception_handler(SignalError)
async def handle_signal_error(request: Request, exc: SignalError):
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc.__class__.__name__}: {exc.message}")
    else:
        logger.warning(f"⚠️ {request.method} {request.url.path}: {exc.__class__.__name__}: {exc.message}")

    content = {"error": exc.message}
    if isinstance(exc, PersistenceError) and exc.data is not None:
        content["data"] = exc.data
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
    logger.warning(f"⚠️ {request.method} {request.url.path}: 请求参数校验失败 {fields}")
    return JSONResponse(status_code=400, content={"error": "잘못된 요청입니다.", "fields": fields})


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(f"❌ {request.method} {request.url.path}: 未预期的异常: {exc}")
    return JSONResponse(status_code=500, content={"error": "서버 오류"})


if __name__ == "__main__":
    log_level = (settings.LOG_LEVEL or "info").lower()
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.PORT,
        log_level=log_level,
        access_log=log_level in {"debug", "info"},
    )
