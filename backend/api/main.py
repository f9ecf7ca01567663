"""
FastAPI application entry point.

Run with: uvicorn --factory api.main:create_app --reload
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.errors import catalog_error_handler
from api.routes import works
from domain.errors import CatalogError
from services.catalog import CatalogService
from services.catalog_store import CatalogStore, build_catalog_store
from services.importer import import_on_startup
from services.search_relay import SearchRelay
from settings import Settings

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[CatalogStore] = None,
    search_relay: Optional[SearchRelay] = None,
) -> FastAPI:
    """Build the app; the store and relay can be injected for tests."""
    settings = settings or Settings.from_env()
    store = store or build_catalog_store(settings)
    search_relay = search_relay or SearchRelay(
        base_url=settings.OPENLIBRARY_SEARCH_URL,
        timeout=settings.SEARCH_TIMEOUT_SECONDS,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # A requested but missing import aborts startup
        import_on_startup(store, settings)
        logger.info("Catalog ready (%s backing)", settings.CATALOG_BACKEND)
        yield

    app = FastAPI(
        title="Shelfmark API",
        description="API for a personal book catalog",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.catalog = CatalogService(store)
    app.state.search_relay = search_relay

    # CORS middleware for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure properly for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.include_router(works.router, tags=["works"])

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {"status": "ok", "service": "Shelfmark API"}

    return app

