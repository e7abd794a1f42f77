from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

_TMP_DIR = Path(tempfile.mkdtemp(prefix="signal-tests-"))
os.environ["SIGNAL_CONFIG_PATH"] = str(_TMP_DIR / "config.yaml")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{(_TMP_DIR / 'signal.db').as_posix()}"
os.environ["AI_API_KEY"] = "test-key"
os.environ["AI_MODEL"] = "test-model"
os.environ["AUTO_ANALYZE_ON_CREATE"] = "true"
os.environ["AUTO_REFRESH_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import update

from app.core.database import AsyncSessionLocal, Base, get_engine, init_db
from app.models.keyword_set import KeywordSet
from app.models.report import GeneratedReport  # noqa: F401
from app.services.analysis_service import analysis_service

USER_HEADERS = {"X-User-Id": "user-1"}
OTHER_HEADERS = {"X-User-Id": "user-2"}

SAMPLE_ANALYSIS: Dict[str, Any] = {
    "ai_one_liner": "여름 캠핑 수요는 상승 추세",
    "ai_body": "<p>백패킹 관련 검색량이 꾸준히 늘고 있습니다.</p>",
    "ai_cases": "<p>캠핑 용품 브랜드의 여름 시즌 매출 증가</p>",
    "ai_metrics": "<ul><li>검색량</li><li>예약률</li></ul>",
    "ai_ops": "<ul><li>주간 키워드 점검</li></ul>",
    "ai_recommendations": "<ul><li>여름 한정 패키지 출시</li></ul>",
    "severity_level": "high",
    "severity_label": "높음",
    "severity_pct": 72,
    "timeline": [
        {"date": "2026-06-01", "dot": "warning", "tagText": "검색 급증", "content": "캠핑 검색량 30% 증가"},
        {"date": "2026-06-08", "dot": "critical", "tagText": "품절", "content": "인기 텐트 품절"},
    ],
    "sources": [
        {"title": "캠핑 트렌드 리포트", "url": "https://example.com/camping", "date": "2026-06-01"},
        {"title": "업계 인터뷰"},
    ],
    "chart_labels": ["D-6", "D-5", "D-4", "D-3", "D-2", "D-1", "D0"],
    "chart_data": [12, 18, 20, 25, 31, 35, 40],
}


class FakeAIService:
    def __init__(self, reply: Optional[str] = None, error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.calls = []

    async def complete(self, user_prompt: str, system_prompt: str = "", max_tokens: Optional[int] = None) -> str:
        self.calls.append({"user": user_prompt, "system": system_prompt})
        if self.error is not None:
            raise self.error
        return self.reply or ""


async def _reset_db() -> None:
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await init_db()


async def _load_keyword_set(keyword_set_id: str) -> Optional[KeywordSet]:
    async with AsyncSessionLocal() as db:
        return await db.get(KeywordSet, keyword_set_id)


async def _set_fields(keyword_set_id: str, **values: Any) -> None:
    async with AsyncSessionLocal() as db:
        await db.execute(update(KeywordSet).where(KeywordSet.id == keyword_set_id).values(**values))
        await db.commit()


@pytest.fixture(autouse=True)
def clean_db():
    asyncio.run(_reset_db())
    analysis_service._in_flight.clear()
    yield


@pytest.fixture()
def fake_ai(monkeypatch) -> FakeAIService:
    fake = FakeAIService(reply="분석 결과입니다.\n" + json.dumps(SAMPLE_ANALYSIS, ensure_ascii=False) + "\n감사합니다.")
    monkeypatch.setattr(analysis_service, "ai", fake)
    return fake


@pytest.fixture()
def client(fake_ai) -> TestClient:
    from main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def load_keyword_set():
    def _load(keyword_set_id: str) -> Optional[KeywordSet]:
        return asyncio.run(_load_keyword_set(keyword_set_id))

    return _load


@pytest.fixture()
def set_keyword_set_fields():
    def _set(keyword_set_id: str, **values: Any) -> None:
        asyncio.run(_set_fields(keyword_set_id, **values))

    return _set


@pytest.fixture()
def create_keyword_set(client, monkeypatch):
    """Create a keyword set through the API without triggering background analysis."""
    from app.api.deps import settings

    def _create(headers: Dict[str, str] = USER_HEADERS, **overrides: Any) -> Dict[str, Any]:
        monkeypatch.setattr(settings, "AUTO_ANALYZE_ON_CREATE", False)
        body = {
            "keywords": ["캠핑", "백패킹"],
            "question": "여름 캠핑 수요가 늘고 있나요?",
            "category": "여행",
            "update_frequency": "24h",
        }
        body.update(overrides)
        response = client.post("/api/keywords", json=body, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create