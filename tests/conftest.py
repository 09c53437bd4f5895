"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from calorie_ledger.config import Settings
from calorie_ledger.containers import AppContainer
from calorie_ledger.domain.budget import BudgetConfig
from calorie_ledger.services.extraction import ExtractionClient, ExtractionService
from calorie_ledger.services.ledger import BlobStore, LedgerStore
from calorie_ledger.services.session import LedgerSession

LEDGER_KEY = "calorie_commander_entries"
USER_CONTEXT = "Male, 44 years old, 81kg. TDEE approx 2050."


@dataclass
class InMemoryBlobStore(BlobStore):
    """In-memory blob store for tests."""

    blobs: dict[str, str] = field(default_factory=dict)
    saves: int = 0

    def load(self, key: str) -> str | None:
        return self.blobs.get(key)

    def save(self, key: str, value: str) -> None:
        self.saves += 1
        self.blobs[key] = value


@dataclass
class FailingBlobStore(InMemoryBlobStore):
    """Blob store that can be told to fail reads or writes."""

    fail_load: bool = False
    fail_save: bool = False

    def load(self, key: str) -> str | None:
        if self.fail_load:
            raise OSError("disk unavailable")
        return super().load(key)

    def save(self, key: str, value: str) -> None:
        if self.fail_save:
            raise OSError("disk full")
        super().save(key, value)


@dataclass
class FakeExtractionClient(ExtractionClient):
    """Fake oracle returning a fixed payload or raising an error."""

    payload: object = field(default_factory=list)
    error: Exception | None = None
    gate: asyncio.Event | None = None
    prompts: list[str] = field(default_factory=list)

    async def extract(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema: dict[str, object],
        prompt: str,
    ) -> object:
        self.prompts.append(prompt)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.payload


@dataclass
class FixedClock:
    """Clock returning a settable instant."""

    now: datetime = field(
        default_factory=lambda: datetime(2026, 10, 18, 9, 30, 15, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        return self.now


EGGS_AND_RUN = [
    {"entryType": "FOOD", "item": "eggs", "calories": 140, "quantity": "2 eggs"},
    {
        "entryType": "EXERCISE",
        "item": "running",
        "calories": 300,
        "quantity": "30 mins",
    },
]


def make_session(
    client: FakeExtractionClient,
    blob_store: BlobStore | None = None,
    clock: FixedClock | None = None,
    budget: BudgetConfig | None = None,
) -> LedgerSession:
    store = LedgerStore(blob_store=blob_store or InMemoryBlobStore(), key=LEDGER_KEY)
    extraction = ExtractionService(
        client=client, model="gpt-5-mini", reasoning_effort="low", store=False
    )
    return LedgerSession(
        ledger_store=store,
        extraction_service=extraction,
        budget=budget or BudgetConfig.from_targets(tdee=2050, target_deficit=500),
        user_context=USER_CONTEXT,
        clock=clock or FixedClock(),
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        openai_api_key="openai-key",
        storage_backend="file",
        ledger_data_dir=str(tmp_path / "data"),
    )


@pytest.fixture
def extraction_client() -> FakeExtractionClient:
    return FakeExtractionClient(payload={"entries": EGGS_AND_RUN})


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def session(
    extraction_client: FakeExtractionClient,
    blob_store: InMemoryBlobStore,
    clock: FixedClock,
) -> LedgerSession:
    return make_session(extraction_client, blob_store, clock)


@pytest.fixture
def container(settings: Settings, session: LedgerSession) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        ledger_store=session.ledger_store,
        extraction_service=session.extraction_service,
        session=session,
        close_resources=close_resources,
    )
