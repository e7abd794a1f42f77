"""
本文件用于提供系统相关 API：应用信息与健康检查。
主要函数:
- `api_get_app_info`: 返回应用名称与版本
- `api_health`: 返回数据库连通性与缺失的关键配置
"""

from fastapi import APIRouter

from app.api.deps import settings
from app.core.config import get_missing_config_keys
from app.core.database import check_db_connection

router = APIRouter(prefix="/api", tags=["system"])


@router.get("/app_info")
async def api_get_app_info():
    return {"app_name": settings.APP_NAME, "version": settings.VERSION}


@router.get("/health")
async def api_health():
    """
    输入:
    - 无

    输出:
    - `status`（ok/degraded）、`database` 连通性、`missing_keys` 缺失配置列表
    """

    db_ok = await check_db_connection(verbose=False)
    missing_keys = get_missing_config_keys(settings)
    return {
        "status": "ok" if db_ok and not missing_keys else "degraded",
        "database": db_ok,
        "missing_keys": missing_keys,
    }
