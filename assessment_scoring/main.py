import asyncio
import signal

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

load_dotenv()

from assessment_scoring.config import settings
from assessment_scoring.core.exceptions import (
    EntityNotFoundException,
    RepositoryException,
    ScoringFailedError,
)
from assessment_scoring.core.logging import configure_logging
from assessment_scoring.routers.health import router as health_router
from assessment_scoring.routers.scoring import (
    not_found_exception_handler,
    repository_exception_handler,
    router as scoring_router,
    scoring_failed_exception_handler,
    validation_exception_handler,
)
from assessment_scoring.shutdown import set_shutdown

logger = structlog.get_logger(__name__)


# SWAGGER UI: tag display order
_OPENAPI_TAGS = [
    {"name": "Root"},
    {"name": "Health"},
    {"name": "Scoring"},
]

# FASTAPI APPLICATION CONFIGURATION
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=_OPENAPI_TAGS,
)

# REGISTER EXCEPTION HANDLERS
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(EntityNotFoundException, not_found_exception_handler)
app.add_exception_handler(ScoringFailedError, scoring_failed_exception_handler)
app.add_exception_handler(RepositoryException, repository_exception_handler)

# REGISTER ROUTERS
app.include_router(health_router)   # Health
app.include_router(scoring_router)  # Scoring


# ROOT ENDPOINT
@app.get("/", tags=["Root"], summary="Root endpoint")
async def root():
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        },
        "status": "running"
    }


# STARTUP EVENT
@app.on_event("startup")
async def startup_event():
    configure_logging()
    logger.info("api_starting", app=settings.APP_NAME, env=settings.APP_ENV)

    loop = asyncio.get_running_loop()

    def _signal_handler(sig):
        logger.info("shutdown_signal_received", signal=sig.name)
        set_shutdown()

    try:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _signal_handler, sig)
    except (NotImplementedError, RuntimeError):
        # Windows / non-main-thread loops
        logger.warning("signal_handlers_unavailable")


# SHUTDOWN EVENT
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("api_stopping")
    set_shutdown()


# RUN WITH UVICORN
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "assessment_scoring.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
