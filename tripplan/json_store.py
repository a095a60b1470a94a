"""Flat JSON file persistence.

Each store owns one file and replaces it wholesale on every save: the document
is written to a temporary file in the same directory, flushed, and renamed
over the target with ``os.replace``. Readers therefore never observe a partial
document. There is no locking; when two writers race the last rename wins.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from .errors import DomainError, NotInitializedError, StorageError
from .models import Trip

log = logging.getLogger(__name__)


class JsonFileStore:
    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> Any:
        """Parse the file. FileNotFoundError propagates; other failures become StorageError."""
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except FileNotFoundError:
            raise
        except (OSError, ValueError) as e:
            log.error("Failed to read %s: %s", self.path, e)
            raise StorageError(f"failed to read {self.path.name}") from e

    def write(self, document: Any) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh, indent=2, ensure_ascii=False)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp, self.path)
            except BaseException:
                # Leave the committed document untouched
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            log.error("Failed to write %s: %s", self.path, e)
            raise StorageError(f"failed to write {self.path.name}") from e


class TripStore(JsonFileStore):
    def load(self) -> Trip:
        try:
            raw = self.read()
        except FileNotFoundError:
            raise NotInitializedError() from None
        try:
            return Trip.from_dict(raw)
        except DomainError as e:
            log.error("Stored trip document at %s is malformed: %s", self.path, e)
            raise StorageError("stored trip document is malformed") from e

    def save(self, trip: Trip) -> None:
        self.write(trip.to_dict())
        log.info("Saved trip %s..%s (%d days) to %s", trip.meta.start_date, trip.meta.end_date, len(trip.days), self.path)


class SharingStore(JsonFileStore):
    def load(self) -> list[dict[str, Any]]:
        try:
            raw = self.read()
        except FileNotFoundError:
            self.write([])
            return []
        if not isinstance(raw, list):
            log.error("Sharing document at %s is not an array", self.path)
            raise StorageError("stored sharing document is malformed")
        return raw

    def save(self, posts: list[dict[str, Any]]) -> None:
        self.write(posts)
        log.info("Saved %d sharing posts to %s", len(posts), self.path)


__all__ = ["JsonFileStore", "SharingStore", "TripStore"]
