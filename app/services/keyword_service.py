"""
本文件用于提供关键词组的增删改查，所有操作均限定在当前用户名下。
主要类/对象:
- `KeywordService`: 关键词组 CRUD 封装
- `keyword_service`: 全局服务单例
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidRequest, NotFound
from app.core.logger import setup_logger
from app.models.keyword_set import KeywordSet
from app.schemas.analysis import SEVERITY_LABELS
from app.schemas.keyword_set import KeywordSetCreate, KeywordSetUpdate
from app.utils.tools import build_keyword_set_title

logger = setup_logger("KeywordService")

INITIAL_SEVERITY_PCT = 45
INITIAL_CHART_LABELS = ["D-2", "D-1", "D0"]
INITIAL_CHART_DATA = [10, 12, 15]


class KeywordService:
    async def list_for_user(self, db: AsyncSession, user_id: str) -> List[KeywordSet]:
        stmt = select(KeywordSet).where(KeywordSet.user_id == user_id).order_by(desc(KeywordSet.updated_at))
        return list((await db.execute(stmt)).scalars().all())

    async def get_owned(self, db: AsyncSession, user_id: str, keyword_set_id: str) -> KeywordSet:
        """
        输入:
        - `user_id`: 当前用户
        - `keyword_set_id`: 关键词组 ID

        输出:
        - 关键词组对象；不存在或不属于该用户时抛出 `NotFound`
        """

        stmt = select(KeywordSet).where(KeywordSet.id == keyword_set_id, KeywordSet.user_id == user_id)
        keyword_set = (await db.execute(stmt)).scalar_one_or_none()
        if keyword_set is None:
            raise NotFound()
        return keyword_set

    async def create(self, db: AsyncSession, user_id: str, payload: KeywordSetCreate) -> KeywordSet:
        """
        输入:
        - `user_id`: 当前用户
        - `payload`: 创建请求体

        输出:
        - 新建的关键词组

        作用:
        - 校验必填项，生成标题与初始时间轴/图表（首次 AI 分析完成前展示用）
        """

        if not payload.keywords or not (payload.question or "").strip() or not payload.category or not payload.update_frequency:
            raise InvalidRequest("필수 필드 누락")

        now = datetime.now()
        keyword_set = KeywordSet(
            user_id=user_id,
            title=build_keyword_set_title(payload.keywords),
            keywords=list(payload.keywords),
            question=payload.question.strip(),
            purpose=(payload.purpose or "").strip() or None,
            category=payload.category,
            update_frequency=payload.update_frequency,
            severity_level="normal",
            severity_label=SEVERITY_LABELS["normal"],
            severity_pct=INITIAL_SEVERITY_PCT,
            timeline=[
                {
                    "date": now.date().isoformat(),
                    "dot": "info",
                    "tagText": "등록",
                    "content": "키워드 세트가 등록되었습니다.",
                }
            ],
            sources=[],
            chart_labels=list(INITIAL_CHART_LABELS),
            chart_data=list(INITIAL_CHART_DATA),
            analysis_status="idle",
            created_at=now,
            updated_at=now,
        )
        db.add(keyword_set)
        await db.commit()
        await db.refresh(keyword_set)
        logger.info(f"🆕 新建关键词组: id={keyword_set.id}, title={keyword_set.title}")
        return keyword_set

    async def update(
        self, db: AsyncSession, user_id: str, keyword_set_id: str, payload: KeywordSetUpdate
    ) -> KeywordSet:
        keyword_set = await self.get_owned(db, user_id, keyword_set_id)
        changes = payload.model_dump(exclude_unset=True)

        labels = changes.get("chart_labels", keyword_set.chart_labels) or []
        data = changes.get("chart_data", keyword_set.chart_data) or []
        if len(labels) != len(data):
            raise InvalidRequest("chart_labels와 chart_data의 길이가 일치해야 합니다.")

        for field, value in changes.items():
            setattr(keyword_set, field, value)
        keyword_set.updated_at = datetime.now()
        await db.commit()
        await db.refresh(keyword_set)
        return keyword_set

    async def delete(self, db: AsyncSession, user_id: str, keyword_set_id: str) -> None:
        keyword_set = await self.get_owned(db, user_id, keyword_set_id)
        await db.delete(keyword_set)
        await db.commit()
        logger.info(f"🗑️ 删除关键词组: id={keyword_set_id}")


keyword_service = KeywordService()
