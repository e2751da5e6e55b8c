"""FastAPI application factory and main entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cosmoscan.api.dependencies import cleanup_dependencies, get_chain_registry
from cosmoscan.api.routes import router
from cosmoscan.config import get_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Cache backend: {settings.cache_backend}")

    registry = get_chain_registry(settings)
    logger.info(f"Chains loaded: {len(registry)} from {settings.chains_dir}")

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    await cleanup_dependencies()
    logger.info("Cleanup complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Read surface for Cosmos-SDK chains: node status, blocks, "
            "validators, accounts and governance, served from a "
            "stale-while-revalidate cache over failover node access."
        ),
        version=settings.app_version,
        lifespan=lifespan,
    )

    allowed_origins = ["*"]
    if settings.allowed_origins:
        allowed_origins = [
            origin.strip() for origin in settings.allowed_origins.split(",") if origin.strip()
        ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
    )

    app.include_router(router)

    @app.get("/api", tags=["root"])
    async def api_info() -> dict[str, str]:
        """API information endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": f"{settings.api_prefix}/health",
        }

    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "cosmoscan.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
        log_level="info",
    )
