"""
Tree Leaves Backend — Leaf Service (Business Logic)
=====================================================

What:  List, create, clear and summarize leaves on top of a LeafStore.
How:   Every mutation is a read-modify-write of the whole collection:
       read() → change the list → write(). Mutations hold an asyncio.Lock
       so two concurrent creates cannot both claim the same free index.
Who:   Called by the /api/leaves route handlers.

Index Assignment:
    Explicit index already present  → no-op, existing record returned
    Explicit index not present      → new record with that index
    No index                        → smallest non-negative integer not in use
                                      (scan upward from 0: {0,1,3} → 2)

Stats Ordering:
    Timestamps are compared as datetimes. Equal timestamps keep insertion
    order (first-seen wins) for recentLeaves, oldestLeaf and newestLeaf.
    Timestamps that do not parse sort as the earliest possible instant.
"""

import asyncio
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, List, NamedTuple, Optional

from app.exceptions import StorageError
from app.schemas.common import utc_timestamp
from app.schemas.leaf import LeafPosition, LeafRecord, LeafStats
from app.services.leaf_store import LeafStore

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "manual"
RECENT_LEAVES_LIMIT = 5

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


class CreateResult(NamedTuple):
    leaf: LeafRecord
    created: bool
    total_leaves: int


def _format_number(value: float) -> str:
    # 36.0 → "36", 31.5 → "31.5"
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def default_position(index: int) -> LeafPosition:
    """
    Display position derived from a leaf index.

    index 4 → left "28%", top "36%", rotation "180deg"
    """
    return LeafPosition(
        left=f"{_format_number(20 + index * 2)}%",
        top=f"{_format_number(30 + index * 1.5)}%",
        rotation=f"{_format_number(index * 45)}deg",
    )


def next_available_index(used: Iterable[int]) -> int:
    """Smallest non-negative integer not in `used`."""
    taken = set(used)
    candidate = 0
    while candidate in taken:
        candidate += 1
    return candidate


def _parse_timestamp(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return _EARLIEST
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class LeafService:
    """
    Business logic layer for leaf operations.

    One instance per application, bound to the application's store.
    """

    def __init__(self, store: LeafStore):
        self.store = store
        self._write_lock = asyncio.Lock()

    async def list_leaves(self) -> List[LeafRecord]:
        leaves = await self.store.read()
        logger.debug("Retrieved %d leaves", len(leaves))
        return leaves

    async def create_leaf(
        self,
        index: Optional[int] = None,
        position: Optional[LeafPosition] = None,
        source: Optional[str] = None,
    ) -> CreateResult:
        """
        Add a leaf, or return the existing one when `index` is already taken.

        Returns:
            CreateResult(leaf, created, total_leaves). `created` is False for
            the duplicate-index no-op.

        Raises:
            StorageError: the new collection could not be persisted.
        """
        async with self._write_lock:
            leaves = await self.store.read()

            if index is not None:
                existing = next((leaf for leaf in leaves if leaf.index == index), None)
                if existing is not None:
                    logger.info("Leaf %d already exists, returning existing leaf", index)
                    return CreateResult(leaf=existing, created=False, total_leaves=len(leaves))
            else:
                index = next_available_index(leaf.index for leaf in leaves)
                logger.debug("Auto-generated next index: %d", index)

            new_leaf = LeafRecord(
                index=index,
                timestamp=utc_timestamp(),
                source=source or DEFAULT_SOURCE,
                position=position or default_position(index),
            )
            leaves.append(new_leaf)

            if not await self.store.write(leaves):
                raise StorageError(
                    message="An error occurred while saving the leaf data",
                    context={"index": index, "platform": self.store.platform},
                )

        logger.info("New leaf added: index %d from %s", new_leaf.index, new_leaf.source)
        return CreateResult(leaf=new_leaf, created=True, total_leaves=len(leaves))

    async def clear_leaves(self) -> None:
        """
        Remove every leaf.

        Raises:
            StorageError: the empty collection could not be persisted.
        """
        async with self._write_lock:
            if not await self.store.write([]):
                raise StorageError(
                    message="An error occurred while clearing leaves data",
                    context={"platform": self.store.platform},
                )
        logger.info("All leaves cleared")

    async def compute_stats(self) -> LeafStats:
        leaves = await self.store.read()

        sources = Counter(leaf.source for leaf in leaves)
        # sorted() is stable, so equal timestamps keep insertion order
        by_newest = sorted(leaves, key=lambda leaf: _parse_timestamp(leaf.timestamp), reverse=True)

        oldest: Optional[LeafRecord] = None
        newest: Optional[LeafRecord] = None
        if leaves:
            # min/max return the first of equal keys
            oldest = min(leaves, key=lambda leaf: _parse_timestamp(leaf.timestamp))
            newest = max(leaves, key=lambda leaf: _parse_timestamp(leaf.timestamp))

        return LeafStats(
            total_leaves=len(leaves),
            sources=dict(sources),
            recent_leaves=by_newest[:RECENT_LEAVES_LIMIT],
            oldest_leaf=oldest,
            newest_leaf=newest,
        )
