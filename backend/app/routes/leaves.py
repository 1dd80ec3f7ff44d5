"""
Tree Leaves Backend — Leaves Route Handlers
=============================================

What:  GET/POST/DELETE /api/leaves and GET /api/leaves/stats.
How:   Extracts the request body, delegates to LeafService, wraps the result
       in a {"success": true, ...} envelope.
Who:   Called by the tree page when it loads, grows a leaf, or resets.

Status codes:
    POST /api/leaves → 201 when a leaf was added
                     → 200 when the index already existed (existing leaf echoed)
                     → 400 invalid body, 500 when the leaf could not be saved
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response

from app.dependencies import get_leaf_service
from app.schemas.common import ErrorResponse
from app.schemas.leaf import (
    CreateLeafRequest,
    LeafClearResponse,
    LeafCreateResponse,
    LeafListResponse,
    LeafStatsResponse,
)
from app.services.leaf_service import LeafService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/leaves", tags=["Leaves"])

EPHEMERAL_NOTE = (
    "Note: leaves are kept in memory on this deployment. "
    "Data may reset when the server process restarts."
)


@router.get(
    "",
    response_model=LeafListResponse,
    response_model_exclude_none=True,
    summary="List all grown leaves",
)
async def list_leaves(service: LeafService = Depends(get_leaf_service)) -> LeafListResponse:
    leaves = await service.list_leaves()
    platform = service.store.platform
    return LeafListResponse(
        leaves=leaves,
        count=len(leaves),
        platform=platform,
        note=EPHEMERAL_NOTE if platform == "memory" else None,
    )


@router.post(
    "",
    status_code=201,
    response_model=LeafCreateResponse,
    responses={
        200: {"description": "Leaf with this index already exists", "model": LeafCreateResponse},
        400: {"description": "Invalid index, position or source", "model": ErrorResponse},
        500: {"description": "Leaf could not be saved", "model": ErrorResponse},
    },
    summary="Grow a new leaf",
)
async def create_leaf(
    response: Response,
    payload: Optional[CreateLeafRequest] = None,
    service: LeafService = Depends(get_leaf_service),
) -> LeafCreateResponse:
    """
    Add a leaf to the tree.

    An empty body (or no body) grows the next free index with the default
    position and source "manual".
    """
    payload = payload or CreateLeafRequest()
    result = await service.create_leaf(
        index=payload.index,
        position=payload.position,
        source=payload.source,
    )

    if not result.created:
        response.status_code = 200
        return LeafCreateResponse(
            leaf=result.leaf,
            total_leaves=result.total_leaves,
            message="Leaf already exists",
        )

    return LeafCreateResponse(
        leaf=result.leaf,
        total_leaves=result.total_leaves,
        message="Leaf added successfully",
    )


@router.delete(
    "",
    response_model=LeafClearResponse,
    response_model_exclude_none=True,
    responses={500: {"description": "Leaves could not be cleared", "model": ErrorResponse}},
    summary="Clear all leaves",
)
async def clear_leaves(service: LeafService = Depends(get_leaf_service)) -> LeafClearResponse:
    await service.clear_leaves()
    return LeafClearResponse()


async def clear_leaves_via_get(service: LeafService = Depends(get_leaf_service)) -> LeafClearResponse:
    """
    GET variant of DELETE /api/leaves for browser-bar resets.

    Only registered when ALLOW_CLEAR_VIA_GET is enabled (see create_app),
    since a GET with side effects can be triggered by prefetchers and crawlers.
    """
    logger.warning("Clearing all leaves via GET")
    await service.clear_leaves()
    return LeafClearResponse(total_leaves=0, method="GET")


@router.get(
    "/stats",
    response_model=LeafStatsResponse,
    summary="Leaf statistics",
    description=(
        "Total count, counts per source, the five most recent leaves and the "
        "oldest/newest leaf by timestamp."
    ),
)
async def leaf_stats(service: LeafService = Depends(get_leaf_service)) -> LeafStatsResponse:
    stats = await service.compute_stats()
    return LeafStatsResponse(stats=stats)

