"""
本文件用于提供异步数据库引擎与会话的惰性初始化，并为路由提供依赖注入会话。
主要函数:
- `get_engine`: 懒加载创建 `AsyncEngine`
- `get_sessionmaker`: 懒加载创建 `sessionmaker`
- `AsyncSessionLocal`: 获取新的 `AsyncSession`
- `init_db`: 创建数据库表结构
- `get_db`: FastAPI 依赖注入会话生成器
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import NullPool

from app.core.config import get_settings
from app.core.exceptions import DatabaseUnavailable
from app.core.logger import logger

settings = get_settings()

_engine: Optional[AsyncEngine] = None
_sessionmaker: Optional[sessionmaker] = None


def _is_sqlite(url: str) -> bool:
    return url.lower().startswith("sqlite")


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is not None:
        return _engine
    url = (settings.DATABASE_URL or "").strip()
    if not url:
        raise RuntimeError("未配置 DATABASE_URL，数据库功能不可用")

    engine_kwargs: Dict[str, Any] = {"echo": False}
    if _is_sqlite(url):
        # SQLite 文件库不做连接池，避免连接跨事件循环复用
        engine_kwargs["poolclass"] = NullPool
    else:
        engine_kwargs["pool_size"] = 20
        engine_kwargs["max_overflow"] = 10

    _engine = create_async_engine(url, **engine_kwargs)

    if _is_sqlite(url):

        @event.listens_for(_engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

    return _engine


def get_sessionmaker() -> sessionmaker:
    global _sessionmaker
    if _sessionmaker is not None:
        return _sessionmaker

    engine = get_engine()
    _sessionmaker = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    return _sessionmaker


def AsyncSessionLocal() -> AsyncSession:
    return get_sessionmaker()()


Base = declarative_base()


async def init_db() -> None:
    """
    输入:
    - 无

    输出:
    - 无

    作用:
    - 初始化数据库表结构（根据 ORM 模型创建表）
    """

    from app.models.keyword_set import KeywordSet  # noqa: F401
    from app.models.report import GeneratedReport  # noqa: F401

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_db_connection(verbose: bool = True) -> bool:
    """
    检查数据库连接是否可用
    """
    try:
        if not (settings.DATABASE_URL or "").strip():
            if verbose:
                logger.warning("⚠️ 未配置 DATABASE_URL")
            return False
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        if verbose:
            logger.warning(f"⚠️ 数据库连接检查失败: {e}")
        return False


async def dispose_engine() -> None:
    """
    输入:
    - 无

    输出:
    - 无

    作用:
    - 释放数据库引擎的连接池（应用退出时调用）
    """
    global _engine, _sessionmaker
    if _engine:
        await _engine.dispose()
    _engine = None
    _sessionmaker = None


async def get_db():
    """
    输入:
    - 无

    输出:
    - 依赖注入可用的 `AsyncSession` 生成器

    作用:
    - 为 FastAPI 路由提供数据库会话，并保证请求结束后自动释放
    """

    # 每次请求前先快速检查连接，连接不可用时直接返回 503
    if not await check_db_connection(verbose=False):
        raise DatabaseUnavailable()

    async with AsyncSessionLocal() as session:
        yield session
