"""
Attendance Tracker - Main Application Entry Point.

Serves the JSON API under ``/api`` and the login, admin and employee pages:
- Check-in/Check-out with geolocation and late detection
- Employee, task and settings management for admins
- Admin dashboard aggregates and CSV export
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session

from app.api.routes.attendance import router as attendance_router
from app.api.routes.auth import router as auth_router
from app.api.routes.dashboard import router as dashboard_router
from app.api.routes.employees import router as employees_router
from app.api.routes.pages import router as pages_router
from app.api.routes.settings import router as settings_router
from app.api.routes.tasks import router as tasks_router
from app.core.config import settings
from app.core.database import create_db_and_tables, engine
from app.core.employee_service import employee_service
from app.core.exceptions import AppError
from app.core.logging import get_logger
from app.core.middleware import SessionGuardMiddleware
from app.core.settings_service import seed_default_settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")

    logger.info("Creating database and tables...")
    create_db_and_tables()
    logger.info("Database and tables created successfully")

    with Session(engine) as session:
        seed_default_settings(session)
        if settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD:
            employee_service.upsert_admin(
                session,
                settings.ADMIN_EMAIL,
                settings.ADMIN_PASSWORD,
                settings.ADMIN_NAME,
            )

    logger.info(f"{settings.APP_NAME} startup complete")

    yield

    # Shutdown
    engine.dispose()
    logger.info(f"{settings.APP_NAME} shutdown complete")


# Initialize FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Employee attendance and task tracking",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# Configure middleware
app.add_middleware(SessionGuardMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


# Error handlers


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    logger.info(f"Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"detail": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Include routers
for router in (
    auth_router,
    attendance_router,
    employees_router,
    tasks_router,
    settings_router,
    dashboard_router,
):
    app.include_router(router, prefix="/api")
app.include_router(pages_router)


# Health check endpoint
@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint for container orchestration and monitoring.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }
