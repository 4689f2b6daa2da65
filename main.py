import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import Base, engine
from app.exception_handlers import register_exception_handlers
from app.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from app.middleware.rate_limit import configure_rate_limiting
from app.routes import admin, auth, tenant_portal, tenants, visitor_logs, visitors

setup_structured_logging(
    log_level=settings.log_level,
    json_format=settings.log_json or settings.environment == "production",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Tasks to run at application startup and shutdown."""
    logger.info(f"Starting {settings.app_name} {settings.app_version} in {settings.environment} mode")
    if settings.debug:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created (if not existing).")
    yield
    logger.info("Shutting down the application...")
    await engine.dispose()


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Dormitory visitor management API",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(StructuredLoggingMiddleware)

    configure_rate_limiting(app)
    register_exception_handlers(app)

    # Include routers
    app.include_router(auth.router, prefix="/api/auth")
    app.include_router(tenants.router, prefix="/api/tenants")
    app.include_router(tenant_portal.router, prefix="/api/tenant")
    app.include_router(visitors.router, prefix="/api/visitors")
    app.include_router(admin.router, prefix="/api/admin")
    app.include_router(visitor_logs.router, prefix="/api/visitor-logs")

    @app.get("/api/health", tags=["Root"])
    async def health():
        return {"status": "ok", "service": settings.app_name, "version": settings.app_version}

    if settings.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)  # Logs SQL statements

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
