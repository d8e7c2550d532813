"""
FastAPI application for Voyager.

Exposes the chat session (tool listing, chat, stats) over HTTP.

Usage:
    # Development server with auto-reload
    uvicorn voyager.api.main:app --reload --host localhost --port 3001

    # Debug mode (verbose logging)
    LOG_LEVEL=DEBUG uvicorn voyager.api.main:app --reload --port 3001
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import config
from ..session import ChatSession
from ..tracing import init_tracing_client, shutdown_tracing
from .routes import chat, health, session, tools


def configure_logging():
    """Configure logging based on the configured log level."""
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("voyager").setLevel(log_level)


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Starting Voyager API server")

    if getattr(app.state, "session", None) is None:
        app.state.session = ChatSession.from_config()
    chat_session: ChatSession = app.state.session

    logger.info("=" * 60)
    logger.info("MODEL BACKEND")
    logger.info(f"  Ollama URL: {config.ollama.base_url}")
    logger.info(f"  Model: {chat_session.gateway.model}")
    logger.info(f"  Max Iterations: {chat_session.max_iterations}")

    logger.info("-" * 60)
    logger.info("REGISTERED TOOLS")
    for schema in chat_session.registry.export_schemas():
        logger.info(f"  - {schema['name']}: {schema['description'][:60]}...")

    logger.info("-" * 60)
    logger.info("LANGFUSE OBSERVABILITY")
    tracing_client = init_tracing_client(config.langfuse)
    for line in tracing_client.describe():
        logger.info(f"  {line}")
    logger.info("=" * 60)

    yield

    logger.info("Shutting down Voyager API server")
    await chat_session.close()
    shutdown_tracing()


def create_app(chat_session: Optional[ChatSession] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        chat_session: Session to serve. Built from configuration at
            startup when omitted.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="Voyager AI API",
        description="Travel concierge chat with tool calling over a local model backend.",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.session = chat_session

    # CORS middleware - allow all origins for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(tools.router, tags=["Tools"])
    app.include_router(chat.router, tags=["Chat"])
    app.include_router(session.router, tags=["Session"])

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Log validation errors before returning 400 response."""
        logger.warning(
            f"Validation error on {request.method} {request.url.path}: {exc.errors()}"
        )
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Invalid request", "detail": jsonable_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})

    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors reduced to JSON-safe fields."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]


# Create the application instance
app = create_app()


def run_server():
    """
    Run the server using uvicorn.

    This is the entry point for running the server programmatically.
    """
    import uvicorn

    uvicorn.run(
        "voyager.api.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.reload,
        workers=1 if config.server.reload else config.server.workers,
    )


if __name__ == "__main__":
    run_server()
