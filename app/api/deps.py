"""
本文件用于提供 FastAPI 依赖注入的集中出口。
主要对象:
- `settings`: 全局配置对象
- `get_db`: 数据库会话依赖注入生成器
- `get_current_user_id`: 从上游身份网关透传的请求头中读取当前用户
"""

from fastapi import Request

from app.core.config import get_settings
from app.core.database import get_db
from app.core.exceptions import Unauthorized

settings = get_settings()


async def get_current_user_id(request: Request) -> str:
    """
    依赖项：读取当前用户 ID（由上游身份网关完成认证后写入请求头）。
    未携带时抛出 401。
    """
    user_id = (request.headers.get(settings.AUTH_USER_HEADER) or "").strip()
    if not user_id:
        raise Unauthorized()
    return user_id


__all__ = ["get_current_user_id", "get_db", "settings"]
