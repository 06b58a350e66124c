"""
Pathwise - career roadmap engine: prerequisite-gated Kanban over a generated task graph.
"""

from fastapi import FastAPI
from contextlib import asynccontextmanager

from app.database import init_db
from app.routes import roadmap, tasks, dependencies, progress
from app.exceptions import register_exception_handlers
from app.services.generator import get_content_generator
from app.logging_config import setup_logging, get_logger

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting Pathwise API...")
    await init_db()
    logger.info("Database initialized")
    yield
    logger.info("Shutting down Pathwise API...")
    await get_content_generator().aclose()
    get_content_generator.cache_clear()


app = FastAPI(
    title="Pathwise",
    description="Career roadmap engine with prerequisite-gated Kanban progress",
    version="0.1.0",
    lifespan=lifespan,
)

# Register custom exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(roadmap.router, prefix="/roadmap", tags=["Roadmap"])
app.include_router(progress.router, tags=["Progress"])
app.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
app.include_router(dependencies.router, prefix="/dependencies", tags=["Dependencies"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
