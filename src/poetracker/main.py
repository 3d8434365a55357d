"""
PoE Tracker FastAPI Application

Role-based Portfolio of Evidence workflow: trainees submit evidence, assessors
grade it, internal and external verifiers audit the grading.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from poetracker.config import settings
from poetracker.core.database import AsyncSessionLocal, close_db, engine, init_db
from poetracker.core.errors import register_error_handlers
from poetracker.core.store import EntityStore
from poetracker.logging_config import setup_logging
from poetracker.seed import seed_demo_data

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events.

    Startup:
    - Configure logging
    - Create the entity store schema
    - Load demo data into an empty store

    Shutdown:
    - Close database connections
    """
    # Startup
    setup_logging(settings.LOG_LEVEL)
    logger.info(f"PoE Tracker starting ({settings.ENVIRONMENT})...")

    try:
        await init_db()
    except Exception as e:
        logger.error(f"Database initialisation failed: {e}")
        raise

    if settings.SEED_DEMO_DATA:
        async with AsyncSessionLocal() as session:
            await seed_demo_data(EntityStore(session))

    logger.info("PoE Tracker ready")

    yield

    # Shutdown
    logger.info("PoE Tracker shutting down...")
    await close_db()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="PoE Tracker",
        description="Portfolio of Evidence submission, assessment and verification workflow",
        version="0.1.0",
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_local else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Health check endpoints
    @app.get("/", tags=["Health"])
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "service": "PoE Tracker",
            "status": "operational",
            "version": "0.1.0",
            "environment": settings.ENVIRONMENT,
        }

    @app.get("/health", tags=["Health"], response_model=None)
    async def health_check() -> JSONResponse:
        """Health check endpoint for load balancers.

        Returns:
            - status: healthy/unhealthy
            - checks: Individual health checks
        """
        checks: dict[str, dict[str, Any]] = {}

        # Entity store health
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            checks["database"] = {
                "status": "healthy",
                "in_memory": settings.is_memory_database,
            }
        except Exception as e:
            checks["database"] = {"status": "unhealthy", "error": str(e)}

        # Storage roots must be directories (they are created on first write)
        storage_ok = all(
            not path.exists() or path.is_dir()
            for path in (settings.UPLOAD_DIR, settings.EXPORT_DIR)
        )
        checks["storage"] = {"status": "healthy" if storage_ok else "unhealthy"}

        # Overall status
        all_healthy = all(check["status"] == "healthy" for check in checks.values())
        status_code = 200 if all_healthy else 503

        return JSONResponse(
            status_code=status_code,
            content={
                "status": "healthy" if all_healthy else "unhealthy",
                "environment": settings.ENVIRONMENT,
                "checks": checks,
            },
        )

    @app.get("/health/ready", tags=["Health"], response_model=None)
    async def readiness_check() -> dict[str, str] | JSONResponse:
        """Readiness check.

        Returns 200 when app is ready to serve traffic.
        """
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "ready"}
        except Exception:
            return JSONResponse(
                status_code=503,
                content={"status": "not_ready"},
            )

    @app.get("/health/live", tags=["Health"])
    async def liveness_check() -> dict[str, str]:
        """Liveness check.

        Returns 200 if app is alive (even if not fully functional).
        """
        return {"status": "alive"}

    # Register API routers
    from poetracker.api.v1 import (
        activity_logs,
        assessments,
        assignments,
        auth,
        notifications,
        portfolio,
        reports,
        structure,
        submissions,
        units,
        users,
        verifications,
    )

    for module in (
        auth,
        users,
        structure,
        units,
        assignments,
        submissions,
        assessments,
        verifications,
        notifications,
        activity_logs,
        reports,
        portfolio,
    ):
        app.include_router(module.router, prefix=API_PREFIX)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "poetracker.main:app",
        host="0.0.0.0",  # nosec B104 - Intentional for containerized deployment
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
