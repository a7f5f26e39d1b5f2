import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from src.core.errors import TransientFetchError, ValidationError
from src.server.api import address, catalog, quote_cart, system
from src.server.api import settings as settings_api
from src.server.db.session import engine as default_engine, init_db
from src.server.settings.config import settings
from src.services.catalog_settings import CatalogSettingsService
from src.services.catalog_store import SqlCatalogStore
from src.services.storage import JsonFileStorage, StorageBackend

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def create_app(
    engine: Optional[Engine] = None,
    storage: Optional[StorageBackend] = None,
) -> FastAPI:
    db_engine = engine or default_engine

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        logger.info("Initializing database...")
        init_db(db_engine)
        yield
        logger.info("Shutting down")

    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    store = SqlCatalogStore(db_engine)
    app.state.store = store
    app.state.settings_service = CatalogSettingsService(store)
    app.state.storage = storage or JsonFileStorage(settings.storage_dir)
    app.state.carts = {}
    app.state.favorites = {}

    # CORS so the storefront frontend can talk to the backend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(TransientFetchError)
    async def transient_error_handler(request: Request, exc: TransientFetchError):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    # Routers
    app.include_router(system.router)
    app.include_router(settings_api.router)   # before catalog: /catalog/settings
    app.include_router(catalog.router)
    app.include_router(quote_cart.router)     # /quote-cart..., /favorites... (X-Session-Id)
    app.include_router(address.router)
    return app


app = create_app()
