"""
Main FastAPI Application for the Visa Processing System
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import IntegrityError as SQLAlchemyIntegrityError
from contextlib import asynccontextmanager
import time
import logging

from app.core.config import get_settings
from app.core.database import create_tables, test_database_connection
from app.core.audit_middleware import RequestBodyCaptureMiddleware, request_body_preview, setup_request_logging
from app.core.exceptions import VisaSystemError
from app.schemas.common import error_body
from app.api.v1.api import api_router

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def is_unique_violation(exc: SQLAlchemyIntegrityError) -> bool:
    """True for unique-constraint failures on PostgreSQL (23505) and SQLite"""
    if getattr(exc.orig, "pgcode", None) == "23505":
        return True
    return "UNIQUE constraint failed" in str(exc.orig)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events
    Handles startup and shutdown tasks
    """
    logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENVIRONMENT})...")
    if settings.AUTO_CREATE_TABLES:
        create_tables()
    else:
        logger.info("Table auto-creation disabled - run init_visa_system.py to create the schema")

    yield

    logger.info(f"Shutting down {settings.PROJECT_NAME}...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Visa application processing: applications, documents, biometrics, payments and notifications",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Request logging (can be disabled)
if not settings.DISABLE_REQUEST_LOGGING:
    setup_request_logging(app)
else:
    logger.info("Request logging disabled via DISABLE_REQUEST_LOGGING")

# Keeps a short copy of each request body for the unhandled-error log
app.add_middleware(RequestBodyCaptureMiddleware)


@app.exception_handler(VisaSystemError)
async def handle_visa_system_error(request: Request, exc: VisaSystemError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(error_body(exc.message, exc.errors)))


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(status_code=exc.status_code, content=error_body(message), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg"),
            "type": error.get("type"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body("Validation failed", errors))


@app.exception_handler(SQLAlchemyIntegrityError)
async def handle_integrity_error(request: Request, exc: SQLAlchemyIntegrityError):
    logger.warning(f"Integrity error on {request.url.path}: {exc.orig}")
    if is_unique_violation(exc):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body("Duplicate entry"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid data: a required value is missing or refers to a record that does not exist"),
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc} body={request_body_preview(request)}",
        exc_info=True,
    )
    errors = [{"detail": str(exc), "type": type(exc).__name__}] if settings.is_development else None
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error", errors),
    )


# Health check endpoint
@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint with database connection test
    """
    db_connected, db_message = test_database_connection()
    health_status = {
        "status": "healthy" if db_connected else "unhealthy",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": time.time(),
        "database": {
            "connected": db_connected,
            "message": db_message
        }
    }
    return JSONResponse(
        status_code=status.HTTP_200_OK if db_connected else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"success": db_connected, "data": health_status},
    )


# Root endpoint
@app.get("/", tags=["Root"])
def root():
    """Root endpoint with basic system information"""
    return {
        "success": True,
        "message": f"{settings.PROJECT_NAME} API",
        "data": {
            "version": settings.VERSION,
            "docsUrl": f"{settings.API_V1_STR}/docs",
            "apiBase": settings.API_V1_STR,
        },
    }


# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)
