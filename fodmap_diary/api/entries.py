"""API endpoints for adding, analyzing and editing diary entries."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from fodmap_diary.api.dependencies import get_diary_service
from fodmap_diary.config import TEMPLATES_DIR
from fodmap_diary.exceptions import DiaryError
from fodmap_diary.services.diary_service import DiaryService
from fodmap_diary.services.entries import FactorId, Level, Severity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["entries"])
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

_CHECKED_VALUES = {"on", "true", "1", "yes"}


# =============================================================================
# Request Models
# =============================================================================


class AnalyzeRequest(BaseModel):
    entries: list[dict] = []


class UpdateEntryRequest(BaseModel):
    key: str
    factors: Optional[dict[FactorId, Level]] = None
    severity: Optional[Severity] = None
    tag: Optional[str] = None


# =============================================================================
# Helpers
# =============================================================================


def _is_checked(value: Optional[str]) -> bool:
    return bool(value) and value.strip().lower() in _CHECKED_VALUES


def _error_page(request: Request, error: Exception):
    return templates.TemplateResponse(
        request, "error.html", {"error": str(error)}, status_code=500
    )


def _home_redirect() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=303)


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/add")
async def add_entry(
    request: Request,
    text: str = Form(""),
    is_note: Optional[str] = Form(None, alias="isNote"),
    override_time: Optional[str] = Form(None, alias="overrideTime"),
    custom_time: Optional[str] = Form(None, alias="customTime"),
    diary: DiaryService = Depends(get_diary_service),
):
    """
    Classify (or store as a note) a free-text entry.

    Returns: Redirect to the diary page
    """
    if not text.strip():
        return _home_redirect()

    moment = None
    if _is_checked(override_time) and custom_time:
        try:
            moment = datetime.fromisoformat(custom_time)
        except ValueError:
            return _error_page(request, ValueError(f"Invalid time: {custom_time}"))

    try:
        await diary.add_entry(text, is_note=_is_checked(is_note), custom_time=moment)
    except DiaryError as e:
        logger.exception("Error classifying entry")
        return _error_page(request, e)

    return _home_redirect()


@router.post("/analyze")
async def analyze_entries(
    payload: AnalyzeRequest,
    diary: DiaryService = Depends(get_diary_service),
):
    """Analyze the entries the client selected (e.g. a local date range)."""
    try:
        return await diary.analyze(payload.entries)
    except DiaryError as e:
        logger.exception("Error analyzing entries")
        return JSONResponse(status_code=500, content={"error": str(e)})


@router.post("/duplicate")
async def duplicate_entry(
    request: Request,
    key: str = Form(...),
    diary: DiaryService = Depends(get_diary_service),
):
    """Copy an entry to the current time."""
    try:
        diary.duplicate_entry(key)
    except DiaryError as e:
        logger.exception("Error duplicating entry")
        return _error_page(request, e)

    return _home_redirect()


@router.post("/update")
async def update_entry(
    payload: UpdateEntryRequest,
    diary: DiaryService = Depends(get_diary_service),
):
    """Patch factors, severity or tag; returns the updated entry."""
    changes = {
        name: getattr(payload, name)
        for name in payload.model_fields_set
        if name != "key"
    }
    try:
        return diary.update_entry(payload.key, **changes)
    except DiaryError as e:
        logger.exception("Error updating entry")
        return JSONResponse(status_code=500, content={"error": str(e)})


@router.post("/delete")
async def delete_entry(
    request: Request,
    key: str = Form(...),
    diary: DiaryService = Depends(get_diary_service),
):
    """Delete an entry by key."""
    try:
        diary.delete_entry(key)
    except DiaryError as e:
        logger.exception("Error deleting entry")
        return _error_page(request, e)

    return _home_redirect()
