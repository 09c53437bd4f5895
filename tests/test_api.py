"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from calorie_ledger.api.app import create_app
from calorie_ledger.config import Settings
from calorie_ledger.containers import AppContainer
from calorie_ledger.services.session import LedgerSession
from tests.conftest import (
    EGGS_AND_RUN,
    FailingBlobStore,
    FakeExtractionClient,
    make_session,
)


def _container_for(settings: Settings, session: LedgerSession) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        ledger_store=session.ledger_store,
        extraction_service=session.extraction_service,
        session=session,
        close_resources=close_resources,
    )


def test_health(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_log_entries_returns_outcome_and_day(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post("/entries", json={"text": "2 eggs and a 30 min run"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "APPLIED"
    assert [entry["item"] for entry in data["entries"]] == ["eggs", "running"]
    day = data["day"]
    assert day["label"] == "Today"
    assert day["budget"] == {"daily_budget": 1550, "target_deficit": 500}
    assert day["summary"] == {
        "consumed": 140,
        "burned": 300,
        "remaining": 1710,
        "percentage": 100.0,
        "tier": "GOOD",
    }


def test_log_entries_not_understood(container: AppContainer) -> None:
    container.session.extraction_service.client = FakeExtractionClient(payload=[])
    client = TestClient(create_app(container))

    response = client.post("/entries", json={"text": "blah"})

    data = response.json()
    assert data["status"] == "NOT_UNDERSTOOD"
    assert data["message"].startswith("I couldn't understand that")
    assert data["day"]["entries"] == []


def test_log_entries_oracle_failure(container: AppContainer) -> None:
    container.session.extraction_service.client = FakeExtractionClient(
        error=RuntimeError("offline")
    )
    client = TestClient(create_app(container))

    response = client.post("/entries", json={"text": "a bagel"})

    assert response.status_code == 200
    assert response.json()["status"] == "FAILED"


def test_day_navigation(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    client.post("/entries", json={"text": "2 eggs and a 30 min run"})

    yesterday = client.post("/day/shift", json={"days": -1}).json()
    assert yesterday["label"] == "Yesterday"
    assert yesterday["entries"] == []
    assert yesterday["summary"]["remaining"] == 1550

    jumped = client.put("/day", json={"view_date": "2026-01-02"}).json()
    assert jumped["view_date"] == "2026-01-02"
    assert jumped["label"] == "Jan 2, 2026"

    today = client.post("/day/today").json()
    assert today["label"] == "Today"
    assert len(today["entries"]) == 2
    assert client.get("/day").json() == today


def test_delete_entry_is_idempotent(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    logged = client.post("/entries", json={"text": "2 eggs and a 30 min run"}).json()
    entry_id = logged["entries"][0]["id"]

    first = client.delete(f"/entries/{entry_id}")
    second = client.delete(f"/entries/{entry_id}")

    assert first.status_code == 200
    assert second.status_code == 200
    assert first.json() == second.json()
    assert first.json()["summary"]["consumed"] == 0


def test_dictation_submit_logs_buffered_text(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    interim = client.post("/dictation/transcript", json={"text": "2 eggs"}).json()
    final = client.post(
        "/dictation/transcript",
        json={"text": "2 eggs and a 30 min run", "final": True},
    ).json()
    assert interim == {"text": "2 eggs", "final": False}
    assert final == {"text": "2 eggs and a 30 min run", "final": True}
    assert client.get("/day").json()["entries"] == []

    response = client.post("/dictation/submit").json()

    assert response["status"] == "APPLIED"
    assert response["entries"][0]["original_text"] == "2 eggs and a 30 min run"
    assert container.session.dictation.text == ""


def test_delete_entry_persistence_failure_returns_503(settings: Settings) -> None:
    blob_store = FailingBlobStore()
    session = make_session(FakeExtractionClient(payload=EGGS_AND_RUN), blob_store)
    client = TestClient(create_app(_container_for(settings, session)))
    logged = client.post("/entries", json={"text": "2 eggs and a 30 min run"}).json()
    entry_id = logged["entries"][0]["id"]
    blob_store.fail_save = True

    response = client.delete(f"/entries/{entry_id}")

    assert response.status_code == 503
    day = client.get("/day").json()
    assert entry_id in [entry["id"] for entry in day["entries"]]
    assert day["summary"]["consumed"] == 140


def test_startup_survives_unreadable_ledger(settings: Settings) -> None:
    blob_store = FailingBlobStore(fail_load=True)
    session = make_session(FakeExtractionClient(), blob_store)

    with TestClient(create_app(_container_for(settings, session))) as client:
        response = client.get("/day")

    assert response.status_code == 200
    assert response.json()["entries"] == []
    assert response.json()["summary"]["remaining"] == 1550


def test_startup_loads_persisted_ledger(settings: Settings) -> None:
    blob_store = FailingBlobStore()
    writer = make_session(FakeExtractionClient(payload=EGGS_AND_RUN), blob_store)
    TestClient(create_app(_container_for(settings, writer))).post(
        "/entries", json={"text": "2 eggs and a 30 min run"}
    )
    reader = make_session(FakeExtractionClient(), blob_store)

    with TestClient(create_app(_container_for(settings, reader))) as client:
        day = client.get("/day").json()

    assert [entry["item"] for entry in day["entries"]] == ["eggs", "running"]


def test_shift_out_of_range_is_rejected(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post("/day/shift", json={"days": 10**7})

    assert response.status_code == 422
    assert client.get("/day").json()["label"] == "Today"
