"""
Tree Leaves Backend — Page Routes
===================================

What:  Serves the tree page (GET /) and the thank-you page (GET /thank-you).
How:   Returns HTML files from settings.static_dir with FileResponse.
       Other front-end assets are served by the StaticFiles mount in main.py.
"""

from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from app.config import Settings
from app.dependencies import get_settings
from app.exceptions import NotFoundError

router = APIRouter(tags=["Pages"], include_in_schema=False)


def _page(settings: Settings, filename: str) -> FileResponse:
    path = Path(settings.static_dir) / filename
    if not path.is_file():
        raise NotFoundError(resource="page", resource_id=filename)
    return FileResponse(path, media_type="text/html")


@router.get("/")
async def index_page(settings: Settings = Depends(get_settings)) -> FileResponse:
    return _page(settings, "index.html")


@router.get("/thank-you")
async def thank_you_page(settings: Settings = Depends(get_settings)) -> FileResponse:
    return _page(settings, "thank-you.html")
