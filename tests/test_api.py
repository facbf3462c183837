"""
Tests for the HTTP surface: analysis, attempts, learner store endpoints and
pronunciation audio.
"""
import pytest
from fastapi.testclient import TestClient

from korean_barista import main
from korean_barista.services import speech_service


@pytest.fixture
def client(store):
    main.app.dependency_overrides[main.get_store] = lambda: store
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


class FakeTTS:
    def __init__(self, text, lang, slow):
        self.text = text
        self.lang = lang

    def write_to_fp(self, fp):
        fp.write(b"ID3-fake-mp3")


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_analyze(client):
    response = client.post("/analyze/", json={"input": "나은 학생이다", "target": "나는 학생이다", "speed": 0})

    assert response.status_code == 200
    data = response.json()
    assert data["score"] == 86
    assert data["mistakes"] == 1
    assert data["corrections"] == [{
        "type": "particle",
        "position": 1,
        "expected": "는",
        "actual": "은",
        "explanation": data["corrections"][0]["explanation"],
    }]


def test_analyze_empty_body_is_perfect(client):
    response = client.post("/analyze/", json={})

    assert response.status_code == 200
    assert response.json()["score"] == 100


def test_sentence_menu_and_pick(client):
    menu = client.get("/sentences/").json()
    assert any(g["id"] == "daily" for g in menu["genres"])

    response = client.get("/sentences/random/", params={"genre": "travel", "difficulty": "sugar-100"})

    assert response.status_code == 200
    assert response.json()["genre"] == "travel"
    assert response.json()["sentence"]["kr"]


def test_submit_attempt_updates_profile_and_stats(client):
    response = client.post("/attempts/", json={
        "input": "나는학생이다", "target": "나는 학생이다", "elapsed_seconds": 30,
        "genre": "daily", "difficulty": "sugar-100",
    })

    assert response.status_code == 200
    analysis = response.json()["analysis"]
    assert [c["type"] for c in analysis["corrections"]] == ["spacing"]

    profile = client.get("/profile/").json()
    assert len(profile["history"]) == 1
    assert profile["mistakes"][0]["type"] == "spacing"
    assert profile["points"] == response.json()["summary"]["total_points"]

    stats = client.get("/stats/").json()
    assert stats["total_sentences"] == 1
    assert stats["mistake_types"] == {"spacing": 1}


def test_submit_empty_attempt_is_bad_request(client):
    response = client.post("/attempts/", json={"input": "", "target": "안녕"})

    assert response.status_code == 400


def test_update_profile_and_settings(client):
    response = client.patch("/profile/", json={"username": "민지"})
    assert response.status_code == 200
    assert response.json()["username"] == "민지"
    assert response.json()["avatar"] == "☕️"

    response = client.patch("/settings/", json={"theme": "dark"})
    assert response.status_code == 200
    assert response.json()["theme"] == "dark"

    response = client.patch("/settings/", json={"theme": "sepia"})
    assert response.status_code == 422


def test_export_import_and_clear(client):
    client.post("/attempts/", json={"input": "안녕하세요", "target": "안녕하세요", "elapsed_seconds": 5})
    backup = client.get("/export/").json()
    assert backup["version"] == 0
    assert len(backup["state"]["history"]) == 1

    assert client.delete("/history/").json() == {"cleared": True}
    assert client.get("/profile/").json()["history"] == []

    response = client.post("/import/", json=backup)
    assert response.status_code == 200
    assert response.json() == {"imported": True}
    assert len(client.get("/profile/").json()["history"]) == 1


def test_import_rejects_bad_document(client):
    response = client.post("/import/", json={"points": 9000})

    assert response.status_code == 400


def test_pronounce(client, monkeypatch):
    monkeypatch.setattr(speech_service, "gTTS", FakeTTS)

    response = client.get("/pronounce/", params={"text": "안녕하세요"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "audio/mpeg"
    assert response.content == b"ID3-fake-mp3"


def test_pronounce_blank_text(client):
    response = client.get("/pronounce/", params={"text": "   "})

    assert response.status_code == 400


def test_pronounce_upstream_failure(client, monkeypatch):
    class FailingTTS(FakeTTS):
        def write_to_fp(self, fp):
            raise speech_service.gTTSError("connection refused")

    monkeypatch.setattr(speech_service, "gTTS", FailingTTS)

    response = client.get("/pronounce/", params={"text": "안녕하세요"})

    assert response.status_code == 503
