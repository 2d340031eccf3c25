"""FastAPI application factory."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from taskboard import __version__
from taskboard.config import Settings
from taskboard.database import init_db, make_engine, make_session_factory, seed_roles
from taskboard.errors import ApiError, api_error_handler, request_validation_handler, unhandled_error_handler
from taskboard.routers import roles, statuses, tasks, users
from taskboard.uploads import UPLOAD_ROUTE

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()

    # -------------------------
    # DATABASE
    # -------------------------
    engine = make_engine(settings.database_url)
    session_factory = make_session_factory(engine)
    init_db(engine)
    seed_roles(session_factory)
    logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))

    # -------------------------
    # APP
    # -------------------------
    app = FastAPI(title="Task Board", version=__version__)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(roles.router, prefix="/role", tags=["roles"])
    app.include_router(users.router, prefix="/user", tags=["users"])
    app.include_router(statuses.router, prefix="/status", tags=["statuses"])
    app.include_router(tasks.router, prefix="/task", tags=["tasks"])

    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(UPLOAD_ROUTE, StaticFiles(directory=str(settings.upload_dir)), name="uploads")
    logger.info("Serving uploads from %s at %s", settings.upload_dir, UPLOAD_ROUTE)

    return app
