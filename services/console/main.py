"""
Order Desk console

Browser UI for managing customers and orders against the backend API.
"""

from fastapi import FastAPI
from contextlib import asynccontextmanager

from shared.core import ServiceHealth, setup_logging, RequestLoggingMiddleware, get_logger, http_dependency_check
from services.console.api.routes import router as console_router
from services.console.application.sessions import SessionStore
from services.console.application.state import Console
from services.console.core_settings import get_settings
from services.console.infrastructure.backend_client import BackendClient

settings = get_settings()

# Service configuration
SERVICE_NAME = "orderdesk-console"
SERVICE_VERSION = settings.SERVICE_VERSION
SERVICE_DESCRIPTION = "Customers and orders console"

setup_logging(
    service_name=SERVICE_NAME,
    level=settings.LOG_LEVEL,
    environment=settings.ENVIRONMENT,
    version=SERVICE_VERSION,
)

logger = get_logger(__name__)

backend_client = BackendClient(settings.BACKEND_URL, timeout=settings.BACKEND_TIMEOUT_SECONDS)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    logger.info(f"Starting {SERVICE_NAME} version {SERVICE_VERSION} against {settings.BACKEND_URL}")
    yield
    logger.info(f"Shutting down {SERVICE_NAME}")

app = FastAPI(
    title=SERVICE_NAME,
    description=SERVICE_DESCRIPTION,
    version=SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url=None,
    openapi_url="/api/openapi.json"
)

app.state.sessions = SessionStore(
    lambda: Console(backend_client),
    maxsize=settings.SESSION_MAX_ENTRIES,
    ttl=settings.SESSION_TTL_SECONDS,
)

app.add_middleware(RequestLoggingMiddleware)

health_service = ServiceHealth(
    SERVICE_NAME,
    SERVICE_VERSION,
    readiness_checks={
        "backend:connectivity": http_dependency_check(f"{backend_client.base_url}/health/live"),
    },
)
app.include_router(health_service.create_health_router())

app.include_router(console_router)

@app.get("/info")
async def info():
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "description": SERVICE_DESCRIPTION,
        "environment": settings.ENVIRONMENT,
        "backend": settings.BACKEND_URL,
        "endpoints": {
            "console": "/",
            "health": "/health",
            "ready": "/health/ready",
            "live": "/health/live",
            "metrics": "/metrics"
        }
    }
