"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stayguard import __version__
from stayguard.compliance import get_calculator
from stayguard.compliance import router as compliance_router
from stayguard.core.config import get_settings

logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False) -> None:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    configure_logging(settings.debug)
    logger.info("Starting %s...", settings.app_name)
    logger.info("Policies directory: %s", settings.policies_dir)

    # Policy table is loaded at startup
    calculator = get_calculator()
    logger.info("Loaded %d stay policies", len(calculator.table))

    yield

    logger.info("Shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Stay-limit compliance engine for the Schengen 90/180 rule and per-visa stay limits",
        version=__version__,
        lifespan=lifespan,
    )

    cors_origins = settings.cors_origins.split(",") if settings.cors_origins != "*" else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(compliance_router)  # /compliance

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.app_name,
            "version": __version__,
            "endpoints": {
                "schengen-status": "/compliance/schengen-status - Schengen 90/180 status",
                "comprehensive-status": "/compliance/comprehensive-status - Status with warnings and advice",
                "validate-trip": "/compliance/validate-trip - Future trip validation",
                "overstay-warnings": "/compliance/overstay-warnings - Overstay warnings for current stays",
                "compare-passports": "/compliance/compare-passports - Multi-passport comparison",
                "policies": "/compliance/policies - Loaded stay policies",
            },
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
