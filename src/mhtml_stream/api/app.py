"""
FastAPI application for the MHTML parsing service.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
import structlog

from ..version import API_VERSION, PARSER_VERSION
from ..config import settings
from ..logging_config import setup_logging
from .routes import health, parse, version
from .middleware import setup_error_handling_middleware, setup_logging_middleware

# Setup logging on module import
setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting MHTML parsing API",
        version=API_VERSION,
        parser_version=PARSER_VERSION,
        log_level=settings.log_level,
    )
    yield
    logger.info("Shutting down MHTML parsing API")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="MHTML Stream",
        description="Streaming extraction of parts, headers and decoded content from MHTML archives",
        version=API_VERSION,
        lifespan=lifespan,
    )

    # Last added is outermost
    setup_logging_middleware(app)
    setup_error_handling_middleware(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(version.router, prefix="/api/v1", tags=["Version"])
    app.include_router(parse.router, prefix="/api/v1/parse", tags=["Parsing"])

    return app


# Create app instance
app = create_app()


def main() -> None:
    """
    Entry point for running the API server directly.

    For development use. In production, use uvicorn directly.
    """
    import uvicorn

    uvicorn.run(
        "mhtml_stream.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
