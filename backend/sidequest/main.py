"""Sidequest API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SidequestError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and file storage initialized on startup via lifespan context manager
    - The quest catalog is seeded on startup only when QUEST_SEED_PATH is set

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py, registered once here
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sidequest.api.error_handlers import register_error_handlers
from sidequest.api.routes import health, proofs, quests
from sidequest.config import Settings, get_settings
from sidequest.infrastructure import database
from sidequest.infrastructure.database import init_db
from sidequest.infrastructure.file_storage import init_storage
from sidequest.infrastructure.observability import setup_logging
from sidequest.services.quest_catalog import QuestCatalogService, load_quest_seeds

logger = logging.getLogger(__name__)


async def _seed_catalog(settings: Settings) -> None:
    seeds = load_quest_seeds(settings.quest_seed_path)
    async with database.db_manager.session() as db:
        inserted = await QuestCatalogService(db).seed_quests(seeds)
    logger.info(f"Startup seeding from {settings.quest_seed_path}: {inserted} new quest(s)")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    init_storage(
        settings.storage_bucket,
        region=settings.storage_region,
        endpoint_url=settings.storage_endpoint_url,
        access_key_id=settings.storage_access_key_id,
        secret_access_key=settings.storage_secret_access_key,
    )
    if settings.quest_seed_path:
        await _seed_catalog(settings)
    logger.info("Sidequest API started")
    yield
    logger.info("Sidequest API shutting down")
    await database.db_manager.dispose()


app = FastAPI(
    title="Sidequest API", version="1.0.0", lifespan=lifespan,
)

# CORS: origins come from settings
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Routes: explicit registration
app.include_router(health.router)
app.include_router(quests.router)
app.include_router(proofs.router)
