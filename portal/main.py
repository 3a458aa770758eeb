"""
Talent Back-Office - Backend API
FastAPI + JWT bearer auth + SQLAlchemy

Run:
  uvicorn portal.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from common.config import get_config
from modules.talent.authorization import (
    PermissionCheckFailed,
    PermissionDenied,
    Unauthorized,
)
from modules.talent.database import close_db, init_db
from modules.talent.review_service import ApplicationNotFound, ReviewError
from modules.talent.store import StoreError
from .routers import health, talent, talent_migration, talent_sync, users

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# Create tables on startup
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    init_db()
    logger.info("Talent back-office API started.")
    yield
    # Shutdown
    close_db()


app = FastAPI(
    title="Talent Back-Office API",
    description="Talent intake, reconciliation and review",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().cors.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error mapping: every failure is a structured {success, error} body ---


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
    )


@app.exception_handler(Unauthorized)
async def unauthorized_handler(request: Request, exc: Unauthorized):
    return _error(401, str(exc))


@app.exception_handler(PermissionDenied)
async def forbidden_handler(request: Request, exc: PermissionDenied):
    return _error(403, str(exc))


@app.exception_handler(PermissionCheckFailed)
async def permission_check_handler(request: Request, exc: PermissionCheckFailed):
    return _error(500, str(exc))


@app.exception_handler(ApplicationNotFound)
async def not_found_handler(request: Request, exc: ApplicationNotFound):
    return _error(404, str(exc))


@app.exception_handler(ReviewError)
async def review_error_handler(request: Request, exc: ReviewError):
    return _error(400, str(exc))


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return _error(500, str(exc))


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(talent_sync.router, tags=["Talent Sync"])
app.include_router(talent_migration.router, tags=["Talent Migration"])
app.include_router(talent.router, prefix="/api", tags=["Talent"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])


@app.get("/")
async def root():
    return {
        "name": "Talent Back-Office API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }
