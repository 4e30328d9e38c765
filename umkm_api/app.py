"""FastAPI application setup module."""
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from umkm_api.database.database import build_engine, build_session_factory, create_tables
from umkm_api.endpoints.inventory import router as inventory_router
from umkm_api.endpoints.products import router as products_router
from umkm_api.endpoints.reports import router as reports_router
from umkm_api.endpoints.sales import router as sales_router
from umkm_api.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def configure_logging(app_settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, app_settings.LOG_LEVEL.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Build the API with its own engine and session factory."""
    app_settings = app_settings or default_settings
    configure_logging(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = build_engine(app_settings.DATABASE_URL, echo=app_settings.DEBUG)
        app.state.engine = engine
        app.state.session_factory = build_session_factory(engine)
        if app_settings.CREATE_TABLES_ON_STARTUP:
            await create_tables(engine)
        logger.info("UMKM Management API ready")
        try:
            yield
        finally:
            await engine.dispose()

    app = FastAPI(
        title="UMKM Management API",
        description="Inventory, point-of-sale and sales reporting for small shops",
        version="1.0.0",
        debug=app_settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    # CORS middleware for frontend integration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(products_router)
    app.include_router(sales_router)
    app.include_router(inventory_router)
    app.include_router(reports_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok", "timestamp": datetime.utcnow().isoformat()}

    return app


app = create_app()
