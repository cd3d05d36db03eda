import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from postmill.db.postgres.base import init_db
from postmill.routers import posts
from postmill.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Render cache table ready")
    yield


app = FastAPI(
    title="postmill",
    description="Markdown posts rendered to HTML behind a read-through cache",
    lifespan=lifespan,
)

app.include_router(posts.router)


@app.get("/")
async def root():
    return {"message": "postmill is running"}
