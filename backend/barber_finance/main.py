"""Barber Finance API: main entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from barber_finance.config import settings
from barber_finance.core.cache import close_cache_backend, get_cache_backend
from barber_finance.core.database import engine, get_db
from barber_finance.core.exceptions import ApiError
from barber_finance.core.middleware import RequestLoggingMiddleware, error_response

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    # Startup
    logger.info("Starting Barber Finance API", env=settings.app_env)
    get_cache_backend()
    yield
    # Shutdown
    logger.info("Shutting down Barber Finance API")
    await close_cache_backend()
    await engine.dispose()


app = FastAPI(
    title="Barber Finance API",
    description="Gestão financeira de barbearias: previsão de fluxo de caixa",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    redirect_slashes=False,
)

# ── Middleware ─────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


# ── Error responses ───────────────────────────────
@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return error_response(request, exc)


# ── Health Check ──────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check():
    """Liveness probe: always returns healthy if the process is running."""
    return {"status": "healthy", "version": "0.1.0"}


@app.get("/ready", tags=["system"])
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """Readiness probe: checks DB connectivity."""
    checks = {"database": "unknown", "api": "ok"}
    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"
        return {"status": "degraded", "checks": checks}

    return {"status": "ready", "checks": checks}


# ── API Routes ────────────────────────────────────
from barber_finance.api.v1 import forecasts  # noqa: E402

app.include_router(forecasts.router, prefix="/api/v1/forecasts", tags=["forecasts"])
