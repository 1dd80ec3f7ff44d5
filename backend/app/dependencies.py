"""
Tree Leaves Backend — Request Dependencies
============================================

What:  FastAPI dependencies handing the application's store, service and
       settings to route handlers.
How:   create_app() places one Settings, one LeafStore and one LeafService
       on app.state; these functions read them back from the request.

Example usage in a route:
    @router.get("/leaves")
    async def list_leaves(service: LeafService = Depends(get_leaf_service)):
        return await service.list_leaves()
"""

from fastapi import Request

from app.config import Settings
from app.services.leaf_service import LeafService
from app.services.leaf_store import LeafStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_leaf_store(request: Request) -> LeafStore:
    return request.app.state.leaf_store


def get_leaf_service(request: Request) -> LeafService:
    return request.app.state.leaf_service
