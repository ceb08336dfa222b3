"""FastAPI dependencies wiring the store and AI provider into handlers."""

from fastapi import Depends
from sqlalchemy.orm import Session

from fodmap_diary.database import get_db
from fodmap_diary.services.ai_service import ClaudeService, DiaryAIProvider
from fodmap_diary.services.diary_service import DiaryService
from fodmap_diary.services.diary_store import DiaryStore

# AI service instance
claude_service = ClaudeService()


def get_store(db: Session = Depends(get_db)) -> DiaryStore:
    return DiaryStore(db)


def get_ai_service() -> DiaryAIProvider:
    return claude_service


def get_diary_service(
    store: DiaryStore = Depends(get_store),
    ai: DiaryAIProvider = Depends(get_ai_service),
) -> DiaryService:
    return DiaryService(store, ai)
