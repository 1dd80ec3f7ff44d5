"""
Tree Leaves Backend — Leaf Request/Response Schemas
=====================================================

What:  Pydantic models for leaf records and the /api/leaves contract.
How:   LeafRecord is both the persisted shape (one element of the JSON array
       in leaves-data.json) and the API shape. Request/response envelopes
       wrap it with the success flag and counts.

Persisted record example:
    {
        "index": 4,
        "timestamp": "2024-01-15T12:00:00.000Z",
        "source": "manual",
        "position": {"left": "28%", "top": "36%", "rotation": "180deg"}
    }
"""

from typing import Annotated, Dict, List, Optional

from pydantic import BaseModel, Field, StrictInt, StrictStr

from app.schemas.common import ApiResponse, CamelModel, utc_timestamp


# ══════════════════════════════════════════════════════════════════════════
# Records: what the store persists
# ══════════════════════════════════════════════════════════════════════════


class LeafPosition(BaseModel):
    """Display hints for the front-end; free-form CSS strings."""
    left: StrictStr = Field(description="CSS left offset, e.g. '28%'")
    top: StrictStr = Field(description="CSS top offset, e.g. '36%'")
    rotation: StrictStr = Field(description="CSS rotation, e.g. '180deg'")


class LeafRecord(BaseModel):
    """
    What:  One leaf on the tree.
    Who:   Persisted by LeafStore, returned by every /api/leaves route.
    """
    index: int = Field(ge=0, description="Leaf slot on the tree; unique within the collection")
    timestamp: str = Field(description="Creation time (UTC ISO 8601)")
    source: str = Field(default="manual", description="Free-form tag describing who added the leaf")
    position: LeafPosition


# ══════════════════════════════════════════════════════════════════════════
# Request Models: what the client sends
# ══════════════════════════════════════════════════════════════════════════


class CreateLeafRequest(BaseModel):
    """
    What:  Body of POST /api/leaves. Every field is optional.

    index:    Omitted or null → the smallest unused non-negative integer.
              Strict: booleans, floats and numeric strings are rejected (400).
    position: Omitted → computed from the index.
    source:   Omitted or empty → "manual".
    """
    index: Optional[Annotated[StrictInt, Field(ge=0)]] = None
    position: Optional[LeafPosition] = None
    source: Optional[StrictStr] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models: what the API returns
# ══════════════════════════════════════════════════════════════════════════


class LeafListResponse(ApiResponse):
    leaves: List[LeafRecord]
    count: int
    timestamp: str = Field(default_factory=utc_timestamp)
    platform: str = Field(description="'local' for file-backed storage, 'memory' for ephemeral")
    note: Optional[str] = None


class LeafCreateResponse(ApiResponse):
    """
    Returned with 201 when a leaf was added, 200 when the index already
    existed (the existing record is echoed back unchanged).
    """
    leaf: LeafRecord
    total_leaves: int
    message: str


class LeafClearResponse(ApiResponse):
    message: str = "All leaves cleared successfully"
    timestamp: str = Field(default_factory=utc_timestamp)
    # Only set by the GET /api/leaves/clear compatibility route
    total_leaves: Optional[int] = None
    method: Optional[str] = None


class LeafStats(CamelModel):
    total_leaves: int
    sources: Dict[str, int]
    recent_leaves: List[LeafRecord] = Field(description="Up to 5 records, newest first")
    oldest_leaf: Optional[LeafRecord] = None
    newest_leaf: Optional[LeafRecord] = None


class LeafStatsResponse(ApiResponse):
    stats: LeafStats
    timestamp: str = Field(default_factory=utc_timestamp)
