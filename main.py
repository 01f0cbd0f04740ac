from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import get_settings
from app.infrastructure.database import engine, initialize_database
from app.interfaces.api.routes import register_routes
from app.utils import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup and release the pool on shutdown."""

    initialize_database()
    yield
    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    configure_logging(get_settings().log_level)
    app = FastAPI(title="Warehouse notification events", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()
