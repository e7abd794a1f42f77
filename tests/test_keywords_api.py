from __future__ import annotations

from datetime import datetime

import pytest

from app.core.exceptions import UpstreamUnavailable
from app.services.analysis_service import analysis_service

from conftest import OTHER_HEADERS, SAMPLE_ANALYSIS, USER_HEADERS

BODY = {
    "keywords": ["캠핑", "백패킹", "글램핑"],
    "question": "여름 캠핑 수요가 늘고 있나요?",
    "purpose": "시즌 기획",
    "category": "여행",
    "update_frequency": "12h",
}


def test_create_returns_initial_state_and_runs_analysis_in_background(client, fake_ai, load_keyword_set):
    response = client.post("/api/keywords", json=BODY, headers=USER_HEADERS)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["title"] == "캠핑 · 백패킹 외 1"
    assert data["user_id"] == "user-1"
    assert data["purpose"] == "시즌 기획"
    assert data["severity_level"] == "normal"
    assert data["severity_label"] == "보통"
    assert data["severity_pct"] == 45
    assert data["chart_labels"] == ["D-2", "D-1", "D0"]
    assert data["chart_data"] == [10, 12, 15]
    assert data["timeline"][0]["tagText"] == "등록"
    assert data["timeline"][0]["dot"] == "info"
    assert data["ai_one_liner"] is None
    assert data["analysis_status"] == "pending"

    assert len(fake_ai.calls) == 1
    row = load_keyword_set(data["id"])
    assert row.analysis_status == "completed"
    assert row.ai_one_liner == SAMPLE_ANALYSIS["ai_one_liner"]
    assert row.timeline == SAMPLE_ANALYSIS["timeline"]


def test_create_records_background_failure(client, fake_ai, load_keyword_set):
    fake_ai.error = UpstreamUnavailable()

    response = client.post("/api/keywords", json=BODY, headers=USER_HEADERS)

    assert response.status_code == 201
    row = load_keyword_set(response.json()["data"]["id"])
    assert row.analysis_status == "failed"
    assert row.last_analysis_error == UpstreamUnavailable.default_message
    assert row.ai_one_liner is None
    assert not analysis_service.is_in_flight(row.id)


@pytest.mark.parametrize("missing", ["keywords", "question", "category", "update_frequency"])
def test_create_requires_fields(client, fake_ai, missing):
    body = dict(BODY)
    body.pop(missing)

    response = client.post("/api/keywords", json=body, headers=USER_HEADERS)

    assert response.status_code == 400
    assert fake_ai.calls == []


@pytest.mark.parametrize("field, value", [("category", "스포츠"), ("update_frequency", "1h")])
def test_create_rejects_unknown_enum_values(client, fake_ai, field, value):
    response = client.post("/api/keywords", json={**BODY, field: value}, headers=USER_HEADERS)

    assert response.status_code == 400
    assert field in response.json()["fields"][0]


def test_requires_user(client):
    assert client.get("/api/keywords").status_code == 401
    assert client.post("/api/keywords", json=BODY).status_code == 401


def test_list_is_scoped_to_user_and_ordered_by_update(client, create_keyword_set, set_keyword_set_fields):
    first = create_keyword_set(keywords=["첫번째"])
    second = create_keyword_set(keywords=["두번째"])
    create_keyword_set(headers=OTHER_HEADERS, keywords=["남의 것"])
    set_keyword_set_fields(first["id"], updated_at=datetime(2030, 1, 1))
    set_keyword_set_fields(second["id"], updated_at=datetime(2029, 1, 1))

    response = client.get("/api/keywords", headers=USER_HEADERS)

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["data"]] == [first["id"], second["id"]]


def test_get_hides_other_users_sets(client, create_keyword_set):
    created = create_keyword_set()

    assert client.get(f"/api/keywords/{created['id']}", headers=USER_HEADERS).status_code == 200
    assert client.get(f"/api/keywords/{created['id']}", headers=OTHER_HEADERS).status_code == 404
    assert client.get("/api/keywords/does-not-exist", headers=USER_HEADERS).status_code == 404


def test_patch_updates_fields_and_timestamp(client, create_keyword_set, set_keyword_set_fields, load_keyword_set):
    created = create_keyword_set()
    set_keyword_set_fields(created["id"], updated_at=datetime(2020, 1, 1))

    response = client.patch(
        f"/api/keywords/{created['id']}",
        json={
            "question": "가을 캠핑은 어떤가요?",
            "update_frequency": "6h",
            "chart_labels": ["1월", "2월"],
            "chart_data": [5, 9],
            "timeline": [{"date": "2026-09-01", "dot": "warning", "tagText": "메모", "content": "수동 입력"}],
        },
        headers=USER_HEADERS,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["question"] == "가을 캠핑은 어떤가요?"
    assert data["update_frequency"] == "6h"
    assert data["chart_labels"] == ["1월", "2월"]
    assert data["timeline"][0]["tagText"] == "메모"
    assert data["keywords"] == ["캠핑", "백패킹"]
    assert load_keyword_set(created["id"]).updated_at > datetime(2020, 1, 1)


def test_patch_enforces_chart_length_invariant(client, create_keyword_set):
    created = create_keyword_set()

    response = client.patch(f"/api/keywords/{created['id']}", json={"chart_data": [1, 2]}, headers=USER_HEADERS)

    assert response.status_code == 400


@pytest.mark.parametrize("body", [{"keywords": []}, {"question": "  "}, {"severity_pct": 101}])
def test_patch_rejects_invalid_values(client, create_keyword_set, body):
    created = create_keyword_set()

    response = client.patch(f"/api/keywords/{created['id']}", json=body, headers=USER_HEADERS)

    assert response.status_code == 400


def test_patch_other_users_set_returns_404(client, create_keyword_set):
    created = create_keyword_set()

    response = client.patch(f"/api/keywords/{created['id']}", json={"purpose": "x"}, headers=OTHER_HEADERS)

    assert response.status_code == 404


def test_delete(client, create_keyword_set, load_keyword_set):
    created = create_keyword_set()

    assert client.delete(f"/api/keywords/{created['id']}", headers=OTHER_HEADERS).status_code == 404
    response = client.delete(f"/api/keywords/{created['id']}", headers=USER_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert load_keyword_set(created["id"]) is None
    assert client.delete(f"/api/keywords/{created['id']}", headers=USER_HEADERS).status_code == 404


def test_reanalyze_runs_in_background(client, fake_ai, create_keyword_set, load_keyword_set):
    created = create_keyword_set()

    response = client.post(f"/api/keywords/{created['id']}/reanalyze", headers=USER_HEADERS)

    assert response.status_code == 202
    assert response.json()["status"] == "started"
    assert response.json()["data"]["analysis_status"] == "pending"
    row = load_keyword_set(created["id"])
    assert row.analysis_status == "completed"
    assert row.ai_one_liner == SAMPLE_ANALYSIS["ai_one_liner"]


def test_reanalyze_while_in_flight_returns_409(client, fake_ai, create_keyword_set):
    created = create_keyword_set()
    analysis_service._in_flight.add(created["id"])

    response = client.post(f"/api/keywords/{created['id']}/reanalyze", headers=USER_HEADERS)

    assert response.status_code == 409
    assert fake_ai.calls == []


def test_reanalyze_other_users_set_returns_404(client, fake_ai, create_keyword_set):
    created = create_keyword_set()

    response = client.post(f"/api/keywords/{created['id']}/reanalyze", headers=OTHER_HEADERS)

    assert response.status_code == 404
    assert fake_ai.calls == []


@pytest.mark.parametrize("field", ["keywords", "question", "category", "update_frequency", "title"])
def test_patch_rejects_null_for_required_fields(client, create_keyword_set, load_keyword_set, field):
    created = create_keyword_set()

    response = client.patch(f"/api/keywords/{created['id']}", json={field: None}, headers=USER_HEADERS)

    assert response.status_code == 400
    row = load_keyword_set(created["id"])
    assert getattr(row, field) == created[field]


def test_patch_allows_clearing_optional_fields(client, create_keyword_set):
    created = create_keyword_set(purpose="시즌 기획")

    response = client.patch(f"/api/keywords/{created['id']}", json={"purpose": None}, headers=USER_HEADERS)

    assert response.status_code == 200
    assert response.json()["data"]["purpose"] is None
