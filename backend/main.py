"""
Personalized Disaster Alert API - Main FastAPI Application

Entry point for the service that turns a ZIP code into a simulated disaster
scenario and a demographically personalized, multilingual emergency alert.
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from core.config import get_settings
from core.exceptions import ConfigurationError
from api.alerts import router as alerts_router
from api.health import router as health_router, SERVICE_NAME, SERVICE_VERSION
from api.llm_logs import router as llm_logs_router
from services.error_handler import AlertErrorCode, get_error_handler
from services.location_service import get_location_repository


# Get settings early to configure logging appropriately
settings = get_settings()

# Configure structured logging based on environment
if settings.DEBUG:
    # Development: human-readable console output
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=True)
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.INFO)
    # LiteLLM is chatty at INFO
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)

else:
    # Production: JSON output for structured logging
    logging.basicConfig(level=logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info(f"Starting {SERVICE_NAME}",
                debug_mode=settings.DEBUG,
                host=settings.HOST,
                port=settings.PORT)

    if settings.DEBUG:
        logger.info("Configuration loaded",
                    allowed_origins=settings.allowed_origins_list,
                    locations_config=settings.LOCATIONS_CONFIG_PATH,
                    llm_configured=bool(
                        settings.GEMINI_API_KEY or settings.ANTHROPIC_API_KEY or settings.OPENAI_API_KEY
                    ))

    # Reference data defects are fatal: refuse to start rather than fail requests
    try:
        locations = get_location_repository()
    except ConfigurationError as e:
        get_error_handler("startup").handle_error(
            error=e,
            code=AlertErrorCode.CONFIGURATION_DEFECT,
            operation="load_location_data"
        )
        raise
    logger.info("Location reference data ready", locations=len(locations))

    yield

    logger.info(f"Shutting down {SERVICE_NAME}")


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title=SERVICE_NAME,
        description="Simulated disaster scenarios with demographically personalized, multilingual alerts",
        version=SERVICE_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    logger.info("Registering API routes")
    app.include_router(health_router, prefix="/api", tags=["health"])
    app.include_router(alerts_router, prefix="/api", tags=["alerts"])
    app.include_router(llm_logs_router, prefix="/api/llm", tags=["llm-logs"])

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """Global exception handler with structured logging."""
        logger.error(
            "Unhandled exception",
            exc_info=exc,
            path=request.url.path,
            method=request.method,
            client_ip=request.client.host if request.client else "unknown"
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(exc) if settings.DEBUG else "An unexpected error occurred"
            }
        )

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "status": "operational",
            "endpoints": {
                "health": "GET /api/health",
                "ready": "GET /api/ready",
                "generateAlert": "POST /api/generate-alert",
                "locations": "GET /api/locations",
                "llmLogs": "GET /api/llm/logs"
            }
        }

    return app


# Create the application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info" if settings.DEBUG else "warning",
        access_log=True
    )
