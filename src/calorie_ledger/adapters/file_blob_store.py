"""Filesystem blob store writing whole snapshots atomically."""

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from calorie_ledger.services.ledger import BlobStore


@dataclass
class FileBlobStore(BlobStore):
    """Stores each blob as a JSON file under a data directory."""

    root: Path

    def load(self, key: str) -> str | None:
        """Return the file contents for a key, or None if missing."""
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def save(self, key: str, value: str) -> None:
        """Write the blob to a temp file, then swap it into place."""
        self.root.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _path(self, key: str) -> Path:
        if not key or "/" in key or key.startswith("."):
            raise ValueError(f"Invalid blob key: {key!r}")
        return self.root / f"{key}.json"
