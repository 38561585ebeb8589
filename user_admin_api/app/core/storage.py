"""
JSON file storage for user records.

All user records live in a single JSON document holding an ordered
list of objects.  ``RecordStore`` reads the whole document on every
``load`` and replaces it on every ``save``; there is no in‑memory
cache.  Writes go to a temporary file in the same directory which is
then renamed over the document, so readers never observe a partially
written file.

Mutations must use ``RecordStore.transaction`` which holds the store's
writer lock across the read‑modify‑write sequence.  Without it two
concurrent updates would both read the same document and the second
write would silently discard the first.
"""

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from pydantic import ValidationError as SchemaError

from .config import settings
from .exceptions import StorageUnavailableError
from ..schemas.user import UserRecord


logger = logging.getLogger(__name__)


def get_users_file_path() -> Path:
    """Compute the path to the users document.

    If ``settings.users_file`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    users_file = settings.users_file
    if os.path.isabs(users_file):
        return Path(users_file)
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return (base_dir / users_file).resolve()


class RecordStore:
    """Load and save the full user collection as one JSON document."""

    def __init__(self, path, strict_reads: Optional[bool] = None) -> None:
        self.path = Path(path)
        self.strict_reads = settings.strict_storage_reads if strict_reads is None else strict_reads
        self._lock = threading.RLock()

    def load(self) -> List[UserRecord]:
        """Return every stored record in document order.

        A missing document is an empty collection.  An unreadable or
        malformed document is also treated as empty (and logged) unless
        the store was created with ``strict_reads``, in which case
        ``StorageUnavailableError`` is raised.  Only reads use this;
        ``transaction`` never degrades.
        """
        return self._load(strict=self.strict_reads)

    def _load(self, strict: bool) -> List[UserRecord]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, list):
                raise ValueError("users document must contain a JSON array")
            return [UserRecord.model_validate(item) for item in data]
        except (OSError, ValueError, SchemaError) as exc:
            # json.JSONDecodeError is a ValueError subclass
            if strict:
                logger.error("Failed to read users document %s: %s", self.path, exc)
                raise StorageUnavailableError(f"Users storage cannot be read: {exc}") from exc
            logger.warning("Users document %s is unreadable, treating as empty: %s", self.path, exc)
            return []

    def save(self, records: List[UserRecord]) -> None:
        """Replace the document with ``records``.

        The parent directory is created if needed.  Any OS error is
        reported as ``StorageUnavailableError``.
        """
        payload = json.dumps([record.to_document() for record in records], ensure_ascii=False, indent=2)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            logger.error("Failed to write users document %s: %s", self.path, exc)
            raise StorageUnavailableError(f"Users storage cannot be written: {exc}") from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass

    @contextmanager
    def transaction(self) -> Iterator[List[UserRecord]]:
        """Serialize a read‑modify‑write cycle on the document.

        Yields the loaded list for in‑place modification and saves it
        when the block completes.  If the block raises, nothing is
        written.  The document is always read strictly here: a document
        that cannot be parsed raises ``StorageUnavailableError`` rather
        than being replaced by the modified empty list.
        """
        with self._lock:
            records = self._load(strict=True)
            yield records
            self.save(records)


_store: Optional[RecordStore] = None


def get_record_store() -> RecordStore:
    """Return the process‑wide store for ``settings.users_file``.

    Used as a FastAPI dependency; tests replace it through
    ``app.dependency_overrides``.
    """
    global _store
    if _store is None:
        _store = RecordStore(get_users_file_path())
    return _store
