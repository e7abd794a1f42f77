"""
本文件用于定义关键词组相关的请求体数据模型。
主要类:
- `KeywordSetCreate`: 创建关键词组请求体
- `KeywordSetUpdate`: 局部更新请求体
"""

from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.analysis import SeverityLevel, SourceItem, TimelineItem

Category = Literal["음악", "패션", "요리", "기술", "여행", "건강", "교육", "영화", "기타"]
UpdateFrequency = Literal["6h", "12h", "24h"]

UPDATE_FREQUENCY_HOURS = {"6h": 6, "12h": 12, "24h": 24}

# 对应非空列，局部更新时不允许显式置空
REQUIRED_UPDATE_FIELDS = ("keywords", "question", "category", "update_frequency", "title")


def _clean_keywords(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return None
    return [v.strip() for v in values if isinstance(v, str) and v.strip()]


class KeywordSetCreate(BaseModel):
    """
    输入:
    - `keywords`/`question`/`category`/`update_frequency`: 必填（非空校验在服务层完成）
    - `purpose`: 追踪目的（可选）

    作用:
    - 创建关键词组的请求体；枚举字段取值非法时直接返回 400
    """

    keywords: List[str] = Field(default_factory=list)
    question: Optional[str] = None
    purpose: Optional[str] = None
    category: Optional[Category] = None
    update_frequency: Optional[UpdateFrequency] = None

    @field_validator("keywords", mode="after")
    @classmethod
    def _strip_keywords(cls, v: List[str]) -> List[str]:
        return _clean_keywords(v) or []


class KeywordSetUpdate(BaseModel):
    keywords: Optional[List[str]] = None
    question: Optional[str] = None
    purpose: Optional[str] = None
    category: Optional[Category] = None
    update_frequency: Optional[UpdateFrequency] = None
    title: Optional[str] = None

    ai_one_liner: Optional[str] = None
    ai_body: Optional[str] = None
    ai_cases: Optional[str] = None
    ai_metrics: Optional[str] = None
    ai_ops: Optional[str] = None
    ai_recommendations: Optional[str] = None

    severity_level: Optional[SeverityLevel] = None
    severity_label: Optional[str] = None
    severity_pct: Optional[int] = Field(default=None, ge=0, le=100)

    chart_labels: Optional[List[str]] = None
    chart_data: Optional[List[Union[int, float]]] = None
    timeline: Optional[List[TimelineItem]] = None
    sources: Optional[List[SourceItem]] = None

    @field_validator("keywords", mode="after")
    @classmethod
    def _non_empty_keywords(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        cleaned = _clean_keywords(v)
        if cleaned is not None and not cleaned:
            raise ValueError("keywords 不能为空")
        return cleaned

    @field_validator("question", mode="after")
    @classmethod
    def _non_empty_question(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("question 不能为空")
        return v

    @model_validator(mode="after")
    def _reject_null_required(self) -> "KeywordSetUpdate":
        nulled = [f for f in REQUIRED_UPDATE_FIELDS if f in self.model_fields_set and getattr(self, f) is None]
        if nulled:
            raise ValueError(f"{', '.join(nulled)} 不能为 null")
        return self
