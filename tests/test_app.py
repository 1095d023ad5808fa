import pytest
from fastapi.testclient import TestClient

import app as app_module
from services.lesson_service import LessonService
from services.module_store import InMemoryModuleStore

from conftest import FailingStore, FakeProvider

@pytest.fixture
def client(monkeypatch, provider):
    monkeypatch.setattr(app_module, "lesson_service", LessonService(provider))
    monkeypatch.setattr(app_module, "module_store", InMemoryModuleStore())
    return TestClient(app_module.app)

def test_generate_lesson(client):
    response = client.post("/api/generate", json={"topic": "Cell Division"})

    assert response.status_code == 200
    assert response.json() == {
        "title": "Cell Division",
        "description": "Cells divide...",
        "outcomes": ["Identify phases", "Explain mitosis"],
        "keyConcepts": ["Mitosis", "Meiosis"],
        "activities": ["Draw diagrams"],
    }

def test_generate_lesson_requires_topic(client):
    response = client.post("/api/generate", json={"topic": "  "})
    assert response.status_code == 400

def test_generate_lesson_provider_failure(monkeypatch, client, provider_failure):
    monkeypatch.setattr(app_module, "lesson_service", LessonService(FakeProvider(lesson=provider_failure)))

    response = client.post("/api/generate", json={"topic": "Cell Division"})

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to generate lesson"

def test_module_suggestions(client):
    response = client.post("/api/module-suggestions", json={"topic": "Cells"})

    assert response.status_code == 200
    assert response.json() == {
        "moduleName": "Cell Biology Basics",
        "difficulty": "Intermediate",
        "prerequisites": "Basic biology, Microscopy",
        "estimatedTime": "45 minutes",
    }

def test_module_lesson(client, provider):
    response = client.post("/api/module-lesson", json={"moduleName": "Plant Biology"})

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Photosynthesis in Plants"
    assert data["difficulty"] == "Beginner"
    assert data["prerequisites"] == "Cell structure"
    assert data["estimatedTime"] == "1 hour"
    assert provider.requests == [("lesson-from-module", "Plant Biology")]

def test_save_and_list_modules(client):
    lesson = client.post("/api/generate", json={"topic": "Cell Division"}).json()
    for name in ("Cells", "Genetics"):
        body = {"moduleName": name, "lesson": lesson, "difficulty": "Beginner", "prerequisites": "None", "time": "1 hour"}
        assert client.post("/api/modules", json=body).json() == {"status": "ok"}

    modules = client.get("/api/modules").json()
    assert [module["moduleName"] for module in modules] == ["Cells", "Genetics"]
    assert modules[0]["lesson"]["keyConcepts"] == ["Mitosis", "Meiosis"]

def test_save_module_sink_failure(monkeypatch, client):
    monkeypatch.setattr(app_module, "module_store", FailingStore())
    lesson = client.post("/api/generate", json={"topic": "Cell Division"}).json()

    response = client.post("/api/modules", json={"moduleName": "Cells", "lesson": lesson})

    assert response.status_code == 500

def test_service_unavailable(monkeypatch, client):
    monkeypatch.setattr(app_module, "lesson_service", None)

    assert client.post("/api/generate", json={"topic": "Cells"}).status_code == 503
    assert client.get("/health").json()["lesson_service"] is False
