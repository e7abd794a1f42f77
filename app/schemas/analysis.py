"""
本文件用于定义 AI 分析相关的请求体与结果结构，并集中维护分析字段的默认值。
主要类/常量:
- `AnalyzeRequest`: 分析请求体
- `AnalysisResult`: 模型输出的结构化结果（缺失字段按默认值补齐）
- `TimelineItem` / `SourceItem`: 时间轴条目与来源条目
- `SEVERITY_LABELS` / `DEFAULT_CHART_LABELS` / `DEFAULT_CHART_DATA`: 默认值
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SeverityLevel = Literal["low", "normal", "high", "critical"]
TimelineDot = Literal["info", "warning", "critical"]

SEVERITY_LABELS: Dict[str, str] = {
    "low": "낮음",
    "normal": "보통",
    "high": "높음",
    "critical": "긴급",
}

DEFAULT_SEVERITY_LEVEL = "normal"
DEFAULT_SEVERITY_PCT = 50
DEFAULT_CHART_LABELS: List[str] = ["D-6", "D-5", "D-4", "D-3", "D-2", "D-1", "D0"]
DEFAULT_CHART_DATA: List[int] = [10, 15, 12, 18, 22, 25, 30]

# 分析完成后整体覆盖的字段
AI_TEXT_FIELDS = (
    "ai_one_liner",
    "ai_body",
    "ai_cases",
    "ai_metrics",
    "ai_ops",
    "ai_recommendations",
)


class TimelineItem(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    date: str = ""
    dot: TimelineDot = "info"
    tagText: str = ""
    content: str = ""


class SourceItem(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    title: str
    url: Optional[str] = None
    date: Optional[str] = None


class AnalyzeRequest(BaseModel):
    """
    输入:
    - `keyword_set_id`: 需要回写结果的关键词组 ID（可选，缺省时不落库）
    - `keywords`: 关键词列表（至少一个）
    - `question`: 核心问题
    - `category`: 分类

    作用:
    - 分析接口的请求体；非空校验在服务层完成，以便统一返回 400
    """

    keyword_set_id: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    question: Optional[str] = None
    category: str = ""


class AnalysisResult(BaseModel):
    """
    输入:
    - 从模型回复中解析出的 JSON 对象

    输出:
    - 字段齐全的分析结果；文本字段缺失时保持为 None，其余字段逐项补默认值

    作用:
    - 在写库前对模型输出做结构校验：缺失字段补默认值，类型或枚举不合法则整体拒绝
    """

    model_config = ConfigDict(extra="ignore")

    ai_one_liner: Optional[str] = None
    ai_body: Optional[str] = None
    ai_cases: Optional[str] = None
    ai_metrics: Optional[str] = None
    ai_ops: Optional[str] = None
    ai_recommendations: Optional[str] = None

    severity_level: SeverityLevel = DEFAULT_SEVERITY_LEVEL
    severity_label: Optional[str] = None
    severity_pct: int = Field(default=DEFAULT_SEVERITY_PCT, ge=0, le=100)

    timeline: List[TimelineItem] = Field(default_factory=list)
    sources: List[SourceItem] = Field(default_factory=list)
    chart_labels: List[str] = Field(default_factory=lambda: list(DEFAULT_CHART_LABELS))
    chart_data: List[Union[int, float]] = Field(default_factory=lambda: list(DEFAULT_CHART_DATA))

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # 模型显式输出 null 时按缺失处理，走默认值
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator("severity_pct", mode="before")
    @classmethod
    def _round_pct(cls, v: Any) -> Any:
        if isinstance(v, float):
            return int(round(v))
        return v

    @model_validator(mode="after")
    def _check_chart(self) -> "AnalysisResult":
        if len(self.chart_labels) != len(self.chart_data):
            raise ValueError(
                f"chart_labels({len(self.chart_labels)}) 与 chart_data({len(self.chart_data)}) 长度不一致"
            )
        if self.severity_label is None:
            self.severity_label = SEVERITY_LABELS[DEFAULT_SEVERITY_LEVEL]
        return self

    def to_record_fields(self) -> Dict[str, Any]:
        """返回需要写入 `keyword_sets` 的全部 AI 字段（整体覆盖）。"""
        fields: Dict[str, Any] = {name: getattr(self, name) for name in AI_TEXT_FIELDS}
        fields.update(
            {
                "severity_level": self.severity_level,
                "severity_label": self.severity_label,
                "severity_pct": self.severity_pct,
                "timeline": [item.model_dump() for item in self.timeline],
                "sources": [item.model_dump(exclude_none=True) for item in self.sources],
                "chart_labels": list(self.chart_labels),
                "chart_data": list(self.chart_data),
            }
        )
        return fields
