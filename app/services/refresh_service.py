"""
本文件用于按关键词组的更新周期（6h/12h/24h）定时重新分析。
主要函数:
- `is_due`: 判断关键词组是否到达刷新时间
- `run_refresh_pass`: 执行一轮到期关键词组的重新分析
- `scheduled_refresh_task`: 定时调度入口（在应用生命周期中启动）
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import select

from app.core.config import get_settings
from app.core.database import AsyncSessionLocal, check_db_connection
from app.core.logger import setup_logger
from app.models.keyword_set import KeywordSet
from app.schemas.keyword_set import UPDATE_FREQUENCY_HOURS
from app.services.analysis_service import analysis_service

settings = get_settings()
logger = setup_logger("RefreshService")


def is_due(keyword_set: KeywordSet, now: Optional[datetime] = None) -> bool:
    """
    输入:
    - `keyword_set`: 关键词组
    - `now`: 当前时间（可选）

    输出:
    - 距上次分析（从未分析则按创建时间）是否已超过更新周期
    """

    now = now or datetime.now()
    hours = UPDATE_FREQUENCY_HOURS.get(keyword_set.update_frequency or "", 24)
    base = keyword_set.last_analyzed_at or keyword_set.created_at
    if base is None:
        return True
    return now - base >= timedelta(hours=hours)


async def find_due_keyword_set_ids(now: Optional[datetime] = None) -> List[str]:
    async with AsyncSessionLocal() as db:
        stmt = select(KeywordSet).where(KeywordSet.analysis_status != "pending")
        rows = (await db.execute(stmt)).scalars().all()
    return [ks.id for ks in rows if is_due(ks, now) and not analysis_service.is_in_flight(ks.id)]


async def run_refresh_pass(now: Optional[datetime] = None) -> int:
    """
    输入:
    - `now`: 当前时间（可选）

    输出:
    - 本轮成功刷新的关键词组数量

    作用:
    - 逐个（串行）重新分析到期的关键词组；单个失败只记录在对应行上，不影响其他行
    """

    due_ids = await find_due_keyword_set_ids(now)
    if not due_ids:
        logger.info("💤 没有需要刷新的关键词组")
        return 0

    logger.info(f"🔁 开始刷新 {len(due_ids)} 个关键词组")
    refreshed = 0
    for keyword_set_id in due_ids:
        if await analysis_service.run_for_keyword_set(keyword_set_id):
            refreshed += 1
    logger.info(f"✅ 本轮刷新完成: 成功 {refreshed}/{len(due_ids)}")
    return refreshed


async def scheduled_refresh_task() -> None:
    """
    输入:
    - 无

    输出:
    - 无

    作用:
    - 定时调度入口：按 `REFRESH_CHECK_INTERVAL_MINUTES` 间隔检查并刷新到期关键词组
    """

    logger.info("⏰ 关键词组定时刷新任务启动...")
    interval_seconds = max(1, settings.REFRESH_CHECK_INTERVAL_MINUTES) * 60
    while True:
        try:
            if not await check_db_connection():
                logger.warning("⚠️ 数据库连接异常，定时刷新暂停运行，等待恢复...")
                await asyncio.sleep(60)
                continue

            await run_refresh_pass()
            await asyncio.sleep(interval_seconds)
        except asyncio.CancelledError:
            logger.info("🛑 关键词组定时刷新任务已停止")
            raise
        except Exception as e:
            logger.error(f"Scheduled refresh task error: {e}")
            await asyncio.sleep(300)
