"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from school_api.config import get_settings
from school_api.errors import SchoolApiError

logger = logging.getLogger(__name__)
settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.APP_DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting School API...")
    yield
    from school_api.database import engine

    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title="School API",
    description="School management API with role-scoped access control",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SchoolApiError)
async def school_api_error_handler(request: Request, exc: SchoolApiError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code, headers=headers)


# REST API router
from school_api.api.v1.router import router as api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health():
    """Basic liveness check."""
    return {"status": "ok", "service": "school-api"}


@app.get("/health/ready")
async def health_ready():
    """Readiness check including the database."""
    from school_api.database import engine
    from sqlalchemy import text

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"status": "ready", "database": "ok"}
    except Exception as e:
        logger.error("Health ready check failed: %s", e)
        return JSONResponse(
            {"status": "not_ready", "database": "error"},
            status_code=503
        )
