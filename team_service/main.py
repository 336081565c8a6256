# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Team Service
============
Team formation for student ideas: declared roles, candidate approaches,
role-conflict resolution, leaders and one level of subroles.

Approach lifecycle:
    pending ─► selected | declined | queued
    selected, declined, queued ─► each other (never back to pending)

Port: 8006
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from team_service.controllers import (
    catalog_controller,
    idea_controller,
    system_controller,
    team_controller,
)
from team_service.core.config import settings
from team_service.core.dependencies import get_catalog_service, get_idea_repo
from team_service.core.exceptions import (
    CapacityError,
    ConcurrencyError,
    InvalidTransitionError,
    NotFoundError,
    PermissionError,
    TeamServiceError,
    ValidationError,
)
from team_service.core.logging import get_logger
from team_service.middleware import MetricsMiddleware, RequestIDMiddleware

logger = get_logger(__name__)


# ── Lifespan ──
@asynccontextmanager
async def lifespan(application: FastAPI):
    repo = get_idea_repo()
    if hasattr(repo, "init_schema"):
        try:
            repo.init_schema()
        except Exception:
            logger.warning("Could not initialise idea table, DB may not be ready yet")
    if settings.SEED_ROLE_CATALOG:
        get_catalog_service().seed_defaults()
    logger.info("%s v%s started", settings.SERVICE_NAME, settings.SERVICE_VERSION)
    yield
    logger.info("Shutting down")


# ── FastAPI App ──
app = FastAPI(
    title="Team Service",
    description="Team formation and role-conflict resolution for student ideas.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


# ── Error handling ──
async def team_error_handler(request: Request, exc: TeamServiceError):
    body = {"error": exc.error_code, "detail": exc.message}
    if isinstance(exc, ValidationError) and exc.details:
        body["details"] = exc.details
    if isinstance(exc, InvalidTransitionError):
        body["allowed"] = exc.allowed
    logger.info(
        "Request rejected: %s %s -> %d %s",
        request.method, request.url.path, exc.status_code, exc.error_code,
    )
    return JSONResponse(status_code=exc.status_code, content=body)


for _exc_type in (
    NotFoundError,
    PermissionError,
    InvalidTransitionError,
    CapacityError,
    ConcurrencyError,
    ValidationError,
    TeamServiceError,
):
    app.add_exception_handler(_exc_type, team_error_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception")
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "detail": str(exc)},
    )


# ── Routers ──
app.include_router(system_controller.router)
app.include_router(idea_controller.router)
app.include_router(team_controller.router)
app.include_router(catalog_controller.router)
