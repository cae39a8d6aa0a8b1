"""Recipes API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map RecipesError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized and schema version checked on startup via lifespan
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from recipes.api.error_handlers import register_error_handlers
from recipes.api.routes import categories, health, ingredients, versions
from recipes.api.routes import recipes as recipe_routes
from recipes.config import get_settings
from recipes.infrastructure.database import close_db, get_db_manager, init_db
from recipes.infrastructure.observability import setup_logging
from recipes.infrastructure.schema_version import run_migrations

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format, settings.log_file_path)
    logger.info("Starting server: recipes")
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=settings.database_pool_timeout,
    )
    async with get_db_manager().transaction() as tx:
        version = await run_migrations(tx)
    logger.info(f"Database connected (version = {version})")
    yield
    logger.info("Recipes API shutting down")
    await close_db()


app = FastAPI(title="Recipes API", version="0.1.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(categories.router)
app.include_router(ingredients.router)
app.include_router(recipe_routes.router)
app.include_router(versions.router)

register_error_handlers(app)


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Welcome to recipes. The front end is not yet available."
