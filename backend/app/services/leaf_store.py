"""
Tree Leaves Backend — Leaf Record Store
=========================================

What:  Reads and replaces the ordered list of leaf records.
How:   Two interchangeable implementations behind the LeafStore interface:
       - FileLeafStore:   JSON document on disk (local / long-running hosts)
       - MemoryLeafStore: list held by the store instance (ephemeral hosts,
                          data lives only as long as the process)
Who:   Owned by the application (created in create_app) and used by
       LeafService and the health routes.
When:  create_leaf_store() runs once per app; the mode never changes after.

Contract shared by both implementations:
    read()   never raises; missing or unreadable data reads as [],
             invalid records are skipped
    write()  never raises; returns False when the data was not persisted

Persisted layout (file mode):
    <DATA_DIR>/leaves-data.json    ← JSON array, indent=2
    <DATA_DIR>/leaves-data.json.corrupt  ← copy of a damaged document, made
                                       before it is first overwritten

    Writes go to a temporary sibling first and are moved into place with
    os.replace(), so a failed write leaves the previous document intact.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Sequence

import aiofiles
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from app.config import Settings
from app.schemas.leaf import LeafRecord

logger = logging.getLogger(__name__)

_records_adapter = TypeAdapter(List[LeafRecord])


class LeafStore(ABC):
    """
    Abstract interface for leaf persistence.

    Implementations:
        - FileLeafStore:   JSON file under settings.data_dir
        - MemoryLeafStore: in-process list
    """

    #: "local" for file-backed storage, "memory" for ephemeral storage
    platform: str = ""

    @abstractmethod
    async def read(self) -> List[LeafRecord]:
        """
        Return the current collection in insertion order.

        Never raises: unreadable storage is logged and reported as empty.
        """
        ...

    @abstractmethod
    async def write(self, records: Sequence[LeafRecord]) -> bool:
        """
        Replace the whole collection with `records`.

        Returns True on success, False on failure (already logged).
        """
        ...

    @abstractmethod
    def is_writable(self) -> bool:
        """Whether a write() would currently have a place to go."""
        ...

    @property
    @abstractmethod
    def data_file_status(self) -> str:
        """Short storage state for the health payload."""
        ...


class FileLeafStore(LeafStore):
    """
    JSON-file persistence.

    Damaged documents:
        A document that is not valid JSON, or whose top level is not a list,
        reads as an empty collection. A list element that is not a valid
        leaf record is skipped and the rest of the list is returned. Both
        cases are logged and data_file_status reports "corrupt", so the
        condition is visible on /api/health.

        Before the next write replaces a damaged document, the document is
        copied to leaves-data.json.corrupt (then .corrupt.1, .corrupt.2, ...).
        If that copy cannot be made the write is refused.
    """

    platform = "local"

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path)
        self.data_dir = self.file_path.parent
        self._damaged = False
        self.data_dir.mkdir(parents=True, exist_ok=True)
        logger.info("FileLeafStore initialized with file=%s", self.file_path.resolve())

    async def read(self) -> List[LeafRecord]:
        if not self.file_path.exists():
            self._damaged = False
            return []

        try:
            async with aiofiles.open(self.file_path, "r", encoding="utf-8") as f:
                raw = await f.read()
            data = json.loads(raw)
        except (OSError, ValueError) as e:
            # ValueError covers JSONDecodeError and UnicodeDecodeError
            self._damaged = True
            logger.error(
                "Leaves file %s is unreadable, treating it as empty: %s",
                self.file_path,
                str(e),
            )
            return []

        if not isinstance(data, list):
            self._damaged = True
            logger.error(
                "Leaves file %s holds a %s instead of a list, treating it as empty",
                self.file_path,
                type(data).__name__,
            )
            return []

        records: List[LeafRecord] = []
        skipped = 0
        for offset, item in enumerate(data):
            try:
                records.append(LeafRecord.model_validate(item))
            except PydanticValidationError as e:
                skipped += 1
                logger.error(
                    "Skipping invalid leaf record #%d in %s: %s",
                    offset,
                    self.file_path.name,
                    e.errors(include_url=False),
                )

        self._damaged = skipped > 0
        logger.debug("Read %d leaves from %s (%d skipped)", len(records), self.file_path.name, skipped)
        return records

    async def write(self, records: Sequence[LeafRecord]) -> bool:
        if self._damaged and self.file_path.exists():
            if not await self._preserve_damaged_file():
                return False

        tmp_path = self.file_path.with_name(self.file_path.name + ".tmp")
        try:
            payload = _records_adapter.dump_json(list(records), indent=2).decode("utf-8")
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            os.replace(tmp_path, self.file_path)
        except (OSError, ValueError) as e:
            logger.error("Failed to save leaves to %s: %s", self.file_path, str(e))
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                logger.debug("Could not remove temporary file %s", tmp_path)
            return False

        self._damaged = False
        logger.info("Saved %d leaves to file (local)", len(records))
        return True

    def _backup_path(self) -> Path:
        candidate = self.file_path.with_name(self.file_path.name + ".corrupt")
        suffix = 1
        while candidate.exists():
            candidate = self.file_path.with_name(f"{self.file_path.name}.corrupt.{suffix}")
            suffix += 1
        return candidate

    async def _preserve_damaged_file(self) -> bool:
        """Copy the damaged document aside before it is replaced."""
        backup = self._backup_path()
        try:
            async with aiofiles.open(self.file_path, "rb") as src:
                content = await src.read()
            async with aiofiles.open(backup, "wb") as dst:
                await dst.write(content)
        except OSError as e:
            logger.error(
                "Refusing to overwrite damaged leaves file %s, backup to %s failed: %s",
                self.file_path,
                backup,
                str(e),
            )
            return False

        logger.warning("Damaged leaves file copied to %s before overwrite", backup)
        return True

    def is_writable(self) -> bool:
        return self.data_dir.is_dir() and os.access(self.data_dir, os.W_OK)

    @property
    def data_file_status(self) -> str:
        if self._damaged:
            return "corrupt"
        return "exists" if self.file_path.exists() else "missing"


class MemoryLeafStore(LeafStore):
    """
    In-process persistence for hosts without a durable filesystem.

    The list belongs to this instance; the application owns one instance,
    so the data lives exactly as long as the hosting process.
    """

    platform = "memory"

    def __init__(self, records: Sequence[LeafRecord] = ()):
        self._records: List[LeafRecord] = list(records)
        logger.info("MemoryLeafStore initialized (data is lost when the process exits)")

    async def read(self) -> List[LeafRecord]:
        logger.debug("Read %d leaves from memory", len(self._records))
        return list(self._records)

    async def write(self, records: Sequence[LeafRecord]) -> bool:
        self._records = list(records)
        logger.info("Saved %d leaves to memory", len(self._records))
        return True

    def is_writable(self) -> bool:
        return True

    @property
    def data_file_status(self) -> str:
        return "memory"


def create_leaf_store(settings: Settings) -> LeafStore:
    """
    Build the store selected by configuration.

    EPHEMERAL_STORAGE (or VERCEL=1) → MemoryLeafStore, otherwise FileLeafStore
    at settings.leaves_file_path.
    """
    if settings.ephemeral_storage:
        return MemoryLeafStore()
    return FileLeafStore(settings.leaves_file_path)
