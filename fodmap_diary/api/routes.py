"""Main application routes."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from fodmap_diary.api.dependencies import get_diary_service
from fodmap_diary.config import TEMPLATES_DIR
from fodmap_diary.factors import FACTORS, LEVELS, SEVERITIES
from fodmap_diary.services.diary_service import DiaryService

router = APIRouter()
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


@router.get("/", response_class=HTMLResponse)
async def home(request: Request, diary: DiaryService = Depends(get_diary_service)):
    """Diary page with every entry embedded as JSON, newest first."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "entries": diary.list_entries(),
            "factors": FACTORS,
            "levels": LEVELS,
            "severities": SEVERITIES,
        },
    )
