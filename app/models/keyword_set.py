"""
本文件用于定义 `keyword_sets` 表的 ORM 模型，承载用户登记的关键词组、追踪设置与 AI 分析结果。
主要类:
- `KeywordSet`: 关键词组模型
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text

from app.core.database import Base


def _new_id() -> str:
    return str(uuid4())


class KeywordSet(Base):
    """
    输入:
    - 追踪设置（关键词、核心问题、目的、分类、更新周期）
    - AI 分析结果（一句话结论、正文、案例、指标、运营、建议、严重度、图表、时间轴、来源）

    输出:
    - 数据库 `keyword_sets` 表的 ORM 映射对象

    作用:
    - 作为用户追踪对象的唯一载体；AI 分析每次完成后整体覆盖分析字段
    """

    __tablename__ = "keyword_sets"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String, index=True, nullable=False)
    title = Column(String, nullable=False, default="")

    keywords = Column(JSON, nullable=False, default=list)
    question = Column(Text, nullable=False)
    purpose = Column(Text, nullable=True)
    category = Column(String, nullable=False)
    update_frequency = Column(String, nullable=False, default="24h")

    ai_one_liner = Column(Text, nullable=True)
    ai_body = Column(Text, nullable=True)
    ai_cases = Column(Text, nullable=True)
    ai_metrics = Column(Text, nullable=True)
    ai_ops = Column(Text, nullable=True)
    ai_recommendations = Column(Text, nullable=True)

    severity_level = Column(String, nullable=True)
    severity_label = Column(String, nullable=True)
    severity_pct = Column(Integer, nullable=True)

    # chart_labels 与 chart_data 按位置一一对应，长度必须相同
    chart_labels = Column(JSON, default=list)
    chart_data = Column(JSON, default=list)

    timeline = Column(JSON, default=list)  # [{date, dot, tagText, content}]
    sources = Column(JSON, default=list)  # [{title, url, date}]

    analysis_status = Column(String, nullable=False, default="idle", index=True)
    last_analysis_error = Column(Text, nullable=True)
    last_analyzed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.now, index=True)
    updated_at = Column(DateTime, default=datetime.now, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "keywords": list(self.keywords or []),
            "question": self.question,
            "purpose": self.purpose,
            "category": self.category,
            "update_frequency": self.update_frequency,
            "ai_one_liner": self.ai_one_liner,
            "ai_body": self.ai_body,
            "ai_cases": self.ai_cases,
            "ai_metrics": self.ai_metrics,
            "ai_ops": self.ai_ops,
            "ai_recommendations": self.ai_recommendations,
            "severity_level": self.severity_level,
            "severity_label": self.severity_label,
            "severity_pct": self.severity_pct,
            "chart_labels": list(self.chart_labels or []),
            "chart_data": list(self.chart_data or []),
            "timeline": list(self.timeline or []),
            "sources": list(self.sources or []),
            "analysis_status": self.analysis_status,
            "last_analysis_error": self.last_analysis_error,
            "last_analyzed_at": self.last_analyzed_at.isoformat() if self.last_analyzed_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
