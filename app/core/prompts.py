"""
本文件用于集中维护关键词分析所用的提示词，并提供用户消息的拼装函数。
主要对象:
- `ANALYSIS_SYSTEM_PROMPT`: 固定系统提示词（约定输出 JSON 结构）
- `build_analysis_user_message`: 按分类、关键词、核心问题拼装用户消息
"""

from typing import List

ANALYSIS_SYSTEM_PROMPT = """당신은 마케팅 실무자를 위한 키워드 분석 전문가입니다.
사용자가 입력한 키워드와 질문을 분석하여, 전략적 인사이트를 제공합니다.

반드시 다음 JSON 형식으로만 응답하세요:
{
  "ai_one_liner": "한 줄 핵심 요약 (50자 이내)",
  "ai_body": "상세 분석 답변 (HTML 형식 허용, 300-500자)",
  "ai_cases": "유사 사례 및 시장 신호 (HTML 형식 허용, 200-300자)",
  "ai_metrics": "추적해야 할 핵심 지표들 (HTML 목록 형식)",
  "ai_ops": "운영 체크리스트 및 KPI (HTML 목록 형식)",
  "ai_recommendations": "추천 실행안 요약 (HTML 목록 형식)",
  "severity_level": "low|normal|high|critical",
  "severity_label": "낮음|보통|높음|긴급",
  "severity_pct": 0-100,
  "timeline": [
    { "date": "날짜", "dot": "info|warning|critical", "tagText": "태그", "content": "내용" }
  ],
  "sources": [
    { "title": "출처 제목", "url": "URL (있을 경우)", "date": "날짜" }
  ],
  "chart_labels": ["D-6", "D-5", "D-4", "D-3", "D-2", "D-1", "D0"],
  "chart_data": [숫자 배열 7개]
}"""


def build_analysis_user_message(category: str, keywords: List[str], question: str) -> str:
    """
    输入:
    - `category`: 分类
    - `keywords`: 关键词列表
    - `question`: 核心问题

    输出:
    - 发送给模型的用户消息（相同输入必然得到相同文本）
    """

    return (
        f"카테고리: {category}\n"
        f"키워드: {', '.join(keywords)}\n"
        f"핵심 질문: {question}\n\n"
        "위 키워드와 질문에 대한 마케팅 전략 분석을 JSON 형식으로 제공해주세요."
    )
