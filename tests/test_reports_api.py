from __future__ import annotations

import types
from datetime import datetime

from app.services.report_service import build_report_snapshot

from conftest import OTHER_HEADERS, SAMPLE_ANALYSIS, USER_HEADERS


def _keyword_set(**overrides):
    values = dict(
        id="ks-1",
        user_id="user-1",
        title="캠핑 · 백패킹",
        question="여름 캠핑 수요가 늘고 있나요?",
        created_at=datetime(2026, 5, 1, 10, 30),
        ai_one_liner=None,
        ai_body=None,
        timeline=[],
        sources=[],
    )
    values.update(overrides)
    return types.SimpleNamespace(**values)


def test_snapshot_maps_timeline_and_sources():
    timeline = [
        {"date": "6/1", "dot": "critical", "tagText": "품절", "content": "텐트 품절"},
        {"date": "6/2", "dot": "warning", "tagText": "", "content": "검색 증가"},
        {"date": "6/3", "dot": "info", "tagText": "안정", "content": "변화 없음"},
        {"date": "6/4", "dot": "info", "tagText": "메모", "content": "네번째"},
        {"date": "6/5", "dot": "warning", "tagText": "다섯번째", "content": "제외 대상"},
    ]
    sources = [{"title": "리포트", "url": "https://example.com/r"}, {"title": "인터뷰"}]
    keyword_set = _keyword_set(ai_one_liner="요약", ai_body="<p>본문</p>", timeline=timeline, sources=sources)

    snapshot = build_report_snapshot(keyword_set, now=datetime(2026, 6, 10, 8, 0))

    assert snapshot["title"] == "캠핑 · 백패킹 - 키워드 변화 추적 보고서"
    assert snapshot["start_date"] == "2026-05-01"
    assert snapshot["end_date"] == "2026-06-10"
    assert snapshot["executive_summary"] == "요약"
    assert snapshot["answer"] == "<p>본문</p>"
    assert snapshot["qualitative_analysis"] == "<p>본문</p>"
    assert snapshot["main_insights"] == [
        {"title": "품절", "content": "텐트 품절", "severity": "high"},
        {"title": "인사이트 2", "content": "검색 증가", "severity": "medium"},
        {"title": "안정", "content": "변화 없음", "severity": "low"},
        {"title": "메모", "content": "네번째", "severity": "low"},
    ]
    assert len(snapshot["timeline_analysis"]) == 5
    assert snapshot["timeline_analysis"][0] == {
        "date": "6/1",
        "title": "품절",
        "description": "텐트 품절",
        "impact": "높음",
    }
    assert [t["impact"] for t in snapshot["timeline_analysis"]] == ["높음", "중간", "낮음", "낮음", "중간"]
    assert snapshot["ref_links"] == ["리포트 (https://example.com/r)", "인터뷰"]


def test_snapshot_uses_placeholders_before_first_analysis():
    snapshot = build_report_snapshot(_keyword_set(), title="맞춤 제목")

    assert snapshot["title"] == "맞춤 제목"
    assert snapshot["executive_summary"] == "분석 결과를 요약합니다."
    assert snapshot["answer"] == "분석 중입니다."
    assert snapshot["qualitative_analysis"] == "정성 분석 내용입니다."
    assert snapshot["main_insights"] == []
    assert snapshot["ref_links"] == []


def test_report_lifecycle(client, fake_ai, create_keyword_set):
    created = create_keyword_set()
    client.post(
        "/api/ai/analyze",
        json={
            "keyword_set_id": created["id"],
            "keywords": created["keywords"],
            "question": created["question"],
            "category": created["category"],
        },
        headers=USER_HEADERS,
    )

    response = client.post("/api/reports", json={"keyword_set_id": created["id"]}, headers=USER_HEADERS)

    assert response.status_code == 201
    report = response.json()["data"]
    assert report["keyword_set_id"] == created["id"]
    assert report["executive_summary"] == SAMPLE_ANALYSIS["ai_one_liner"]
    assert report["ref_links"][0] == "캠핑 트렌드 리포트 (https://example.com/camping)"
    assert report["main_insights"][1]["severity"] == "high"

    listing = client.get("/api/reports", headers=USER_HEADERS).json()["data"]
    assert [r["id"] for r in listing] == [report["id"]]
    assert client.get("/api/reports", headers=OTHER_HEADERS).json()["data"] == []

    fetched = client.get(f"/api/reports/{report['id']}", headers=USER_HEADERS)
    assert fetched.status_code == 200
    assert fetched.json()["data"] == report
    assert client.get(f"/api/reports/{report['id']}", headers=OTHER_HEADERS).status_code == 404

    assert client.delete(f"/api/reports/{report['id']}", headers=OTHER_HEADERS).status_code == 404
    assert client.delete(f"/api/reports/{report['id']}", headers=USER_HEADERS).json() == {"success": True}
    assert client.get(f"/api/reports/{report['id']}", headers=USER_HEADERS).status_code == 404


def test_report_is_not_changed_by_later_analysis(client, fake_ai, create_keyword_set):
    created = create_keyword_set()
    report = client.post("/api/reports", json={"keyword_set_id": created["id"]}, headers=USER_HEADERS).json()["data"]

    client.post(
        "/api/ai/analyze",
        json={"keyword_set_id": created["id"], "keywords": ["캠핑"], "question": "질문", "category": "여행"},
        headers=USER_HEADERS,
    )

    fetched = client.get(f"/api/reports/{report['id']}", headers=USER_HEADERS).json()["data"]
    assert fetched["executive_summary"] == "분석 결과를 요약합니다."
    assert fetched["timeline_analysis"][0]["title"] == "등록"


def test_reports_cannot_be_modified(client, create_keyword_set):
    created = create_keyword_set()
    report = client.post("/api/reports", json={"keyword_set_id": created["id"]}, headers=USER_HEADERS).json()["data"]

    response = client.patch(f"/api/reports/{report['id']}", json={"title": "변경"}, headers=USER_HEADERS)

    assert response.status_code == 405


def test_report_requires_owned_keyword_set(client, create_keyword_set):
    created = create_keyword_set()

    response = client.post("/api/reports", json={"keyword_set_id": created["id"]}, headers=OTHER_HEADERS)

    assert response.status_code == 404
    assert client.post("/api/reports", json={}, headers=USER_HEADERS).status_code == 400
