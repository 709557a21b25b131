# app/main.py
from contextlib import asynccontextmanager
import logging

import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from app.core.config import Settings, get_settings
from app.core.errors import register_exception_handlers

# Routers
from app.routers.auth import router as auth_router
from app.routers.cart import router as cart_router
from app.routers.health import router as health_router
from app.routers.products import router as products_router
from app.routers.seller_stats import router as seller_stats_router

logger = logging.getLogger("uvicorn")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Settings are read once here and handed to every component through
    the `get_settings` dependency; tests pass their own instance.
    """
    settings = settings or get_settings()

    logging.basicConfig(level=settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        Startup:
          - Log where the API is served and which Supabase project it fronts.

        Shutdown:
          - No special cleanup needed; Supabase clients are plain HTTP.
        """
        logger.info("🚀 %s starting on port %s", settings.PROJECT_NAME, settings.PORT)
        logger.info("📡 Supabase project: %s", settings.SUPABASE_URL)
        for route in app.routes:
            methods = ",".join(sorted(getattr(route, "methods", None) or []))
            if methods:
                logger.info("   %-7s %s", methods, route.path)
        yield

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.dependency_overrides[get_settings] = lambda: settings

    # --- CORS configuration ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "Authorization",
            "X-Requested-With",
            "Accept",
            "Origin",
        ],
    )

    register_exception_handlers(app)

    # Everything lives under the API prefix, e.g. /api
    app.include_router(products_router, prefix=settings.API_PREFIX)
    app.include_router(seller_stats_router, prefix=settings.API_PREFIX)
    app.include_router(cart_router, prefix=settings.API_PREFIX)
    app.include_router(auth_router, prefix=settings.API_PREFIX)
    app.include_router(health_router, prefix=settings.API_PREFIX)

    return app


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    settings = get_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
