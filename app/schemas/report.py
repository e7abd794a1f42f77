"""
本文件用于定义报告相关的请求体数据模型。
主要类:
- `ReportCreate`: 由关键词组生成报告的请求体
"""

from typing import Optional

from pydantic import BaseModel


class ReportCreate(BaseModel):
    """
    输入:
    - `keyword_set_id`: 作为快照来源的关键词组 ID
    - `title`: 自定义标题（可选，缺省时按关键词组标题生成）

    输出:
    - 报告生成请求体模型
    """

    keyword_set_id: str
    title: Optional[str] = None
