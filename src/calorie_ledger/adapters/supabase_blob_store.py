"""Supabase-backed blob store for ledger snapshots."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from calorie_ledger.services.ledger import BlobStore


@dataclass
class SupabaseBlobStore(BlobStore):
    """Stores each blob as one row keyed by name."""

    client: Client
    table: str = "ledger_blobs"

    def load(self, key: str) -> str | None:
        """Return the stored blob for a key, if present."""
        response = (
            self.client.table(self.table)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        value = response.data[0].get("value")
        return value if isinstance(value, str) else None

    def save(self, key: str, value: str) -> None:
        """Upsert the blob row for a key."""
        response = (
            self.client.table(self.table)
            .upsert(
                {
                    "key": key,
                    "value": value,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="key",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to save blob {key}")
