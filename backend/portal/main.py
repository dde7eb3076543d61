"""
Main Application Entry Point
============================

Responsibilities:
- Initialize FastAPI application
- Configure middleware stack
- Register API routers
- Set up exception handlers
- Provide health check endpoints
- Configure CORS

IMPORTANT:
    PostgreSQL tables are managed via Alembic migrations. Only a SQLite
    database is created from the models at startup.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from portal.core.config import settings
from portal.core.exceptions import PortalException
from portal.core.logging import configure_logging, get_logger
from portal.db.base import Base
from portal.db.session import check_database_connection, engine

# Import models so every table is registered on Base.metadata
import portal.models  # noqa: F401

from portal.middleware.auth_middleware import (
    AuthMiddleware,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
)
from portal.routes import (
    admin_routes,
    auth_routes,
    document_routes,
    member_routes,
    profile_routes,
)

configure_logging()

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Application Lifespan Handler
# =====================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Application starting",
        extra={
            "app_name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
        }
    )

    if engine.dialect.name == "sqlite":
        Base.metadata.create_all(bind=engine)
        logger.info("SQLite schema created from models")

    if not check_database_connection():
        logger.error("Database connection failed on startup")
    else:
        logger.info("Database connection established")

    try:
        yield
    finally:
        logger.info("Application shutdown complete")


# =====================================
# FastAPI App Initialization
# =====================================

app = FastAPI(
    title=settings.APP_NAME,
    description="""
    Role-based content portal.

    ## Authentication

    Use the `/auth/login` endpoint to obtain access and refresh tokens.
    Include the access token in the `Authorization` header as `Bearer <token>`.

    ## Authorization

    Roles are independent flags; an account may hold any combination:
    * `USER`: Read published documents, browse members
    * `EDITOR`, `JOURNALIST`: Content roles
    * `OFFICIAL`: Create documents, see drafts and archives
    * `MODERATOR`: Moderate member profiles, see internal documents
    * `ADMIN`: Manage accounts, roles and all content

    An account with no roles is pending and may only reach the
    pending-approval surface.
    """,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)


# =====================================
# Middleware
# =====================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
    max_age=3600,
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(AuthMiddleware)


# =====================================
# Exception Handlers
# =====================================

@app.exception_handler(PortalException)
async def portal_exception_handler(request: Request, exc: PortalException):
    logger.warning(
        "Portal exception",
        extra={
            "exception_type": type(exc).__name__,
            "message": exc.message,
            "status_code": exc.status_code,
            "path": request.url.path,
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning("Request validation error", extra={"path": request.url.path, "errors": errors})

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"message": "Validation error", "details": {"errors": errors}},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Logs the error; the message is hidden in production."""
    logger.error(
        "Unhandled exception",
        extra={
            "exception_type": type(exc).__name__,
            "message": str(exc),
            "path": request.url.path,
            "method": request.method,
        },
        exc_info=True,
    )

    if settings.is_production:
        content = {"message": "An unexpected error occurred", "details": {}}
    else:
        content = {"message": str(exc), "details": {"type": type(exc).__name__}}
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


# =====================================
# Register Routers
# =====================================

app.include_router(auth_routes.router)
app.include_router(auth_routes.pending_router)
app.include_router(document_routes.router)
app.include_router(member_routes.router)
app.include_router(admin_routes.router)
app.include_router(profile_routes.router)


# =====================================
# Health Check Endpoints
# =====================================

@app.get("/", tags=["Health"], summary="Basic Health Check")
def health_check():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.get("/health", tags=["Health"], summary="Detailed Health Check")
def detailed_health_check():
    db_healthy = check_database_connection()
    return {
        "status": "healthy" if db_healthy else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "checks": {"database": "healthy" if db_healthy else "unhealthy"},
    }


@app.get("/ready", tags=["Health"], summary="Readiness Check")
def readiness_check():
    """200 if the database answers, 503 otherwise."""
    if not check_database_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {"status": "ready"}
