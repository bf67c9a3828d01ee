import asyncio

import pytest
from fastapi.testclient import TestClient

from voiceplan.main import app
from voiceplan.pipeline import UNSUPPORTED_REQUEST, VoicePlanPipeline
from voiceplan.routes.content import get_pipeline, get_store
from voiceplan.schemas.drafts import (
    ItineraryDraft,
    NewSubtasksDraft,
    PlanDraft,
    RecognizeIntentOutput,
    UserInsightsDraft,
)
from voiceplan.storage import InMemoryContentStore

from tests.conftest import audio_uri, details, stored_itinerary, stored_plan
from tests.test_itinerary import LISBON


@pytest.fixture
def store():
    return InMemoryContentStore()


@pytest.fixture
def client(llm, store):
    pipeline = VoicePlanPipeline(llm)
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def saved_plan(store, sample_plan):
    document = stored_plan(sample_plan)
    asyncio.run(store.upsert("plan", document))
    return document


@pytest.fixture
def saved_itinerary(store, sample_itinerary):
    document = stored_itinerary(sample_itinerary)
    asyncio.run(store.upsert("itinerary", document))
    return document


def test_probes(client):
    assert client.get("/").json()["service"] == "VoicePlan API"
    assert client.get("/health").json()["status"] == "healthy"


def test_create_plan_from_voice(client, llm, store):
    llm.queue_transcription("Buy milk and eggs")
    llm.queue(RecognizeIntentOutput, {"intent": "createPlan"})
    llm.queue(PlanDraft, {"title": "Groceries", "summary": "Shopping.", "categories": [
        {"category": "Errands", "tasks": [{"task": "Buy milk"}, {"task": "Buy eggs"}]},
    ]})
    llm.on_task_details(lambda text: details(text, category="Errands", emoji="🛒"))

    response = client.post("/api/users/user-1/voice", json={"audioDataUri": audio_uri()})

    assert response.status_code == 200
    body = response.json()
    assert body["type"] == "plan"
    assert body["transcription"] == "Buy milk and eggs"
    assert body["data"]["userId"] == "user-1"
    assert body["data"]["id"].startswith("plan-")
    stored = client.get("/api/users/user-1/plans").json()
    assert [plan["id"] for plan in stored] == [body["data"]["id"]]


def test_create_itinerary_from_voice(client, llm):
    llm.queue_transcription("Lisbon June 1 to 3")
    llm.queue(RecognizeIntentOutput, {"intent": "createItinerary"})
    llm.queue(ItineraryDraft, LISBON)

    body = client.post("/api/users/user-1/voice", json={"audioDataUri": audio_uri()}).json()

    assert body["type"] == "itinerary"
    assert body["data"]["startDate"] == "2024-06-01"
    assert len(client.get("/api/users/user-1/itineraries").json()) == 1


def test_unsupported_voice_is_422(client, llm, store):
    llm.queue_transcription("What's the weather today?")
    llm.queue(RecognizeIntentOutput, {"intent": "unsupported"})

    response = client.post("/api/users/user-1/voice", json={"audioDataUri": audio_uri()})

    assert response.status_code == 422
    assert response.json()["detail"] == UNSUPPORTED_REQUEST
    assert client.get("/api/users/user-1/plans").json() == []


def test_update_plan_from_voice(client, llm, saved_plan):
    llm.queue_transcription("Buy oat milk")
    llm.queue(PlanDraft, {"title": "Busy Week", "summary": "S", "categories": [
        {"category": "Personal", "tasks": [{"id": "task-2", "task": "Buy oat milk"}]},
    ]})

    response = client.post("/api/users/user-1/plans/plan-1/voice", json={"audioDataUri": audio_uri()})

    body = response.json()
    assert body["data"]["id"] == "plan-1"
    assert body["data"]["createdAt"] == saved_plan.created_at
    assert body["data"]["transcription"] == "Buy oat milk"
    assert body["data"]["categories"][0]["tasks"][0]["id"] == "task-2"


def test_update_unknown_plan_is_404(client):
    response = client.post("/api/users/user-1/plans/nope/voice", json={"audioDataUri": audio_uri()})

    assert response.status_code == 404


def test_update_itinerary_from_voice(client, llm, saved_itinerary):
    llm.queue_transcription("hmm")
    llm.queue(ItineraryDraft, {})

    response = client.post(
        "/api/users/user-1/itineraries/itinerary-1/voice", json={"audioDataUri": audio_uri()}
    )

    assert response.status_code == 422
    assert "Could not update the itinerary" in response.json()["detail"]


def test_add_subtasks_from_voice(client, llm, saved_plan):
    llm.queue_transcription("also book a room")
    llm.queue(NewSubtasksDraft, {"subtasks": [{"text": "Book a room"}]})

    response = client.post(
        "/api/users/user-1/plans/plan-1/tasks/task-1/subtasks/voice",
        json={"audioDataUri": audio_uri()},
    )

    body = response.json()
    assert [s["text"] for s in body["task"]["subtasks"]] == ["Collect numbers", "Write summary", "Book a room"]
    assert body["data"]["categories"][0]["tasks"][0]["subtasks"][2]["text"] == "Book a room"


def test_direct_edits(client, saved_plan):
    status = client.patch("/api/users/user-1/plans/plan-1/tasks/task-2", json={"status": "Done"})
    subtask = client.patch(
        "/api/users/user-1/plans/plan-1/tasks/task-1/subtasks/s2", json={"completed": True}
    )
    title = client.patch("/api/users/user-1/plans/plan-1", json={"title": "Renamed"})

    assert status.json()["categories"][1]["tasks"][0]["status"] == "Done"
    assert subtask.json()["categories"][0]["tasks"][0]["subtasks"][1]["completed"] is True
    final = title.json()
    assert final["title"] == "Renamed"
    assert final["categories"][1]["tasks"][0]["status"] == "Done"


def test_invalid_status_is_rejected(client, saved_plan):
    response = client.patch("/api/users/user-1/plans/plan-1/tasks/task-2", json={"status": "Later"})

    assert response.status_code == 422


def test_delete_and_share(client, saved_plan, saved_itinerary):
    assert client.get("/api/share/plan/plan-1").json()["title"] == "Busy Week"
    assert client.get("/api/share/itinerary/itinerary-1").status_code == 200

    assert client.delete("/api/users/user-1/plans/plan-1").status_code == 204
    assert client.delete("/api/users/user-1/plans/plan-1").status_code == 404
    assert client.get("/api/share/plan/plan-1").status_code == 404


def test_insights(client, llm, saved_plan):
    llm.queue(UserInsightsDraft, {"insights": [{"emoji": "🚀", "text": t} for t in ("a", "b", "c")],
                                  "productivityPeak": "Friday"})

    body = client.get("/api/users/user-1/insights").json()

    assert len(body["insights"]) == 3
    assert body["productivityPeak"] == "Friday"


def test_insights_without_history(client, llm):
    body = client.get("/api/users/user-1/insights").json()

    assert len(body["insights"]) == 3
    assert llm.calls == []
