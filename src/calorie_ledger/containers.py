"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from calorie_ledger.adapters.file_blob_store import FileBlobStore
from calorie_ledger.adapters.openai_extraction_client import OpenAIExtractionClient
from calorie_ledger.adapters.supabase_blob_store import SupabaseBlobStore
from calorie_ledger.config import (
    Settings,
    build_budget,
    build_user_context,
    resolve_timezone,
)
from calorie_ledger.services.extraction import ExtractionService
from calorie_ledger.services.ledger import BlobStore, LedgerStore
from calorie_ledger.services.session import LedgerSession


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    ledger_store: LedgerStore
    extraction_service: ExtractionService
    session: LedgerSession
    close_resources: Callable[[], Awaitable[None]]


def build_blob_store(settings: Settings) -> BlobStore:
    """Create the blob store selected by settings."""
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required "
                "for the supabase storage backend"
            )
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseBlobStore(client=client, table=settings.supabase_table)
    if settings.storage_backend == "file":
        return FileBlobStore(root=Path(settings.ledger_data_dir))
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    ledger_store = LedgerStore(
        blob_store=build_blob_store(resolved_settings),
        key=resolved_settings.ledger_storage_key,
    )
    openai_client = OpenAIExtractionClient.create(
        resolved_settings.openai_api_key,
        timeout_seconds=resolved_settings.openai_timeout_seconds,
    )
    extraction_service = ExtractionService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort or None,
        store=resolved_settings.openai_store,
    )
    session = LedgerSession(
        ledger_store=ledger_store,
        extraction_service=extraction_service,
        budget=build_budget(resolved_settings),
        user_context=build_user_context(resolved_settings),
        timezone=resolve_timezone(resolved_settings),
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        ledger_store=ledger_store,
        extraction_service=extraction_service,
        session=session,
        close_resources=close_resources,
    )
