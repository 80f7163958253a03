from contextlib import asynccontextmanager
import logging
import sys

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles

from api import authors, books
from api.rendering import STATIC_DIR, render_error
from config.app_config import Settings, get_settings
from constants import PageMessages
from database import SessionLocal, engine
from dependencies import build_generic_services_registry
from exceptions import ApplicationError
from init_db import init_database
from utils.error_handlers import status_for_error
from utils.logging_utils import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown"""
    settings: Settings = app.state.settings

    # Startup
    init_database(engine, seed=settings.seed_database, session_factory=SessionLocal)

    # A DTO that does not fit its entity stops the app here, not on first use
    app.state.generic_services = build_generic_services_registry()

    yield

    # Shutdown
    engine.dispose()
    logger.info("Application shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use; defaults to the environment's settings
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_dir)

    app = FastAPI(
        title=settings.app_title,
        description="Book list with sorting, filtering and paging, and forms that update books through GenericServices",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(books.router, tags=["books"])
    app.include_router(authors.router, tags=["authors"])

    @app.exception_handler(ApplicationError)
    async def application_error_handler(request: Request, exc: ApplicationError):
        status_code, detail = status_for_error(exc)
        logger.error(f"{request.method} {request.url.path} - {type(exc).__name__}: {exc.message}", exc_info=exc)
        errors = [f"{key}: {value}" for key, value in exc.details.items()] if settings.debug else []
        message = detail if settings.debug or status_code < 500 else PageMessages.UNEXPECTED_ERROR
        return render_error(request, message, status_code, errors)

    return app


app = create_app()


if __name__ == "__main__":
    import socket
    import uvicorn
    from constants import ServerConfig

    # Check if port is available
    def is_port_in_use(port: int) -> bool:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            try:
                s.bind((ServerConfig.HOST, port))
                return False
            except OSError:
                return True

    if is_port_in_use(ServerConfig.PORT):
        logger.error(f"Port {ServerConfig.PORT} is already in use!")
        sys.exit(1)

    logger.info(f"Starting BookApp on {ServerConfig.url()}...")
    uvicorn.run(app, host=ServerConfig.HOST, port=ServerConfig.PORT)
