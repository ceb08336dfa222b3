import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from fodmap_diary import __version__
from fodmap_diary.api import routes, entries
from fodmap_diary.database import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("FODMAP Diary ready")
    yield


app = FastAPI(title="FODMAP Diary", version=__version__, lifespan=lifespan)

# Include routers
app.include_router(routes.router)
app.include_router(entries.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
