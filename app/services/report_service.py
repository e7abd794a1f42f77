"""
本文件用于实现报告导出：把关键词组当前的分析结果固化为只读快照，并提供列表/读取/删除。
主要类/对象:
- `ReportService`: 报告服务（快照构建与持久化）
- `report_service`: 全局服务单例
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFound
from app.core.logger import setup_logger
from app.models.keyword_set import KeywordSet
from app.models.report import GeneratedReport
from app.utils.tools import date_part, today_str

logger = setup_logger("ReportService")

MAIN_INSIGHT_LIMIT = 4

_DOT_TO_SEVERITY = {"critical": "high", "warning": "medium"}
_DOT_TO_IMPACT = {"critical": "높음", "warning": "중간"}


def build_report_snapshot(
    keyword_set: KeywordSet, title: Optional[str] = None, now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    输入:
    - `keyword_set`: 来源关键词组
    - `title`: 自定义标题（可选）
    - `now`: 导出时间（可选，便于测试）

    输出:
    - 报告字段字典（不含 id/created_at）

    作用:
    - 时间轴前 4 条转为主要洞察，全部时间轴转为时间轴分析，来源拼接为参考链接文本
    """

    timeline: List[Dict[str, Any]] = [t for t in (keyword_set.timeline or []) if isinstance(t, dict)]
    sources: List[Dict[str, Any]] = [s for s in (keyword_set.sources or []) if isinstance(s, dict)]

    main_insights = []
    for idx, item in enumerate(timeline[:MAIN_INSIGHT_LIMIT]):
        main_insights.append(
            {
                "title": item.get("tagText") or f"인사이트 {idx + 1}",
                "content": item.get("content") or "",
                "severity": _DOT_TO_SEVERITY.get(item.get("dot"), "low"),
            }
        )

    timeline_analysis = [
        {
            "date": item.get("date") or "",
            "title": item.get("tagText") or "",
            "description": item.get("content") or "",
            "impact": _DOT_TO_IMPACT.get(item.get("dot"), "낮음"),
        }
        for item in timeline
    ]

    ref_links = []
    for s in sources:
        label = s.get("title") or ""
        ref_links.append(f"{label} ({s['url']})" if s.get("url") else label)

    return {
        "user_id": keyword_set.user_id,
        "keyword_set_id": keyword_set.id,
        "title": title or f"{keyword_set.title} - 키워드 변화 추적 보고서",
        "start_date": date_part(keyword_set.created_at),
        "end_date": today_str(now),
        "executive_summary": keyword_set.ai_one_liner or "분석 결과를 요약합니다.",
        "question": keyword_set.question,
        "answer": keyword_set.ai_body or "분석 중입니다.",
        "main_insights": main_insights,
        "timeline_analysis": timeline_analysis,
        "qualitative_analysis": keyword_set.ai_body or "정성 분석 내용입니다.",
        "ref_links": ref_links,
    }


class ReportService:
    async def list_for_user(self, db: AsyncSession, user_id: str) -> List[GeneratedReport]:
        stmt = select(GeneratedReport).where(GeneratedReport.user_id == user_id).order_by(desc(GeneratedReport.created_at))
        return list((await db.execute(stmt)).scalars().all())

    async def get_owned(self, db: AsyncSession, user_id: str, report_id: str) -> GeneratedReport:
        stmt = select(GeneratedReport).where(GeneratedReport.id == report_id, GeneratedReport.user_id == user_id)
        report = (await db.execute(stmt)).scalar_one_or_none()
        if report is None:
            raise NotFound()
        return report

    async def create_from_keyword_set(
        self, db: AsyncSession, keyword_set: KeywordSet, title: Optional[str] = None
    ) -> GeneratedReport:
        """
        输入:
        - `keyword_set`: 已确认归属当前用户的关键词组
        - `title`: 自定义标题（可选）

        输出:
        - 新建的报告快照

        作用:
        - 固化导出时刻的分析结果；之后关键词组再被分析也不影响该报告
        """

        report = GeneratedReport(**build_report_snapshot(keyword_set, title), created_at=datetime.now())
        db.add(report)
        await db.commit()
        await db.refresh(report)
        logger.info(f"📄 已生成报告: id={report.id}, keyword_set_id={keyword_set.id}")
        return report

    async def delete(self, db: AsyncSession, user_id: str, report_id: str) -> None:
        report = await self.get_owned(db, user_id, report_id)
        await db.delete(report)
        await db.commit()


report_service = ReportService()
