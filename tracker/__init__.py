import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import LOG_LEVEL, require_cleanup_secret
from .database import engine, init_db
from .errors import TrackerError
from .routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    require_cleanup_secret()
    init_db()
    logger.info("Location tracker ready")
    yield
    engine.dispose()
    logger.info("Location tracker shut down")


async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
    return JSONResponse({"success": False, "error": exc.message}, status_code=exc.status_code)


def create_app() -> FastAPI:
    """Application factory for the location tracker API."""
    logging.basicConfig(level=LOG_LEVEL)
    app = FastAPI(title="Location Tracker", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_exception_handler(TrackerError, tracker_error_handler)
    app.include_router(router)
    return app


app = create_app()
