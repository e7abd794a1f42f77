"""
本文件用于定义 `generated_reports` 表的 ORM 模型，保存由关键词组导出的只读报告快照。
主要类:
- `GeneratedReport`: 报告快照模型
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, String, Text

from app.core.database import Base


class GeneratedReport(Base):
    """
    输入:
    - `keyword_set_id`: 来源关键词组 ID（不做外键约束）
    - 报告正文（摘要、问答、主要洞察、时间轴分析、定性分析、参考链接）

    输出:
    - 数据库 `generated_reports` 表的 ORM 映射对象

    作用:
    - 保存导出时刻的关键词组快照；创建后不再修改，仅支持删除
    """

    __tablename__ = "generated_reports"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String, index=True, nullable=False)
    keyword_set_id = Column(String(36), index=True, nullable=True)

    title = Column(String, nullable=False)
    start_date = Column(String(10), nullable=False)
    end_date = Column(String(10), nullable=False)
    executive_summary = Column(Text, nullable=True)
    question = Column(Text, nullable=True)
    answer = Column(Text, nullable=True)
    main_insights = Column(JSON, default=list)  # [{title, content, severity}]
    timeline_analysis = Column(JSON, default=list)  # [{date, title, description, impact}]
    qualitative_analysis = Column(Text, nullable=True)
    ref_links = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.now, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "keyword_set_id": self.keyword_set_id,
            "title": self.title,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "executive_summary": self.executive_summary,
            "question": self.question,
            "answer": self.answer,
            "main_insights": list(self.main_insights or []),
            "timeline_analysis": list(self.timeline_analysis or []),
            "qualitative_analysis": self.qualitative_analysis,
            "ref_links": list(self.ref_links or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
