import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notifyhub.bootstrap import AppServices, build_services
from notifyhub.config import Settings, get_settings
from notifyhub.infrastructure.database import initialize_database
from notifyhub.interfaces.api.errors import register_exception_handlers
from notifyhub.interfaces.api.middleware import REQUEST_ID_HEADER, RequestLoggingMiddleware
from notifyhub.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema at startup and release pooled connections on shutdown."""

    services: AppServices = app.state.services
    initialize_database(services.engine)
    yield
    await services.connections.close_all()
    services.engine.dispose()


def create_app(settings: Settings | None = None, *, services: AppServices | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="notifyhub", lifespan=lifespan)
    app.state.services = services or build_services(settings)

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    register_exception_handlers(app)
    register_routes(app)
    return app


app = create_app()
