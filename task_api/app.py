import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request

from task_api import __version__
from task_api.core.config import Settings, get_settings
from task_api.core.errors import error_response
from task_api.core.logging_config import configure_logging
from task_api.repositories.json_storage import JsonDatabase, PersistError, UninitializedError
from task_api.repositories.task_repository import TaskRepository
from task_api.routers import database as database_router
from task_api.routers import health as health_router
from task_api.routers import tasks as tasks_router
from task_api.services.task_service import TaskService

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API with one JsonDatabase shared by every request."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    database = JsonDatabase(settings.database_filename, settings.database_directory)
    repository = TaskRepository(database)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await database.initialize()
        info = database.get_info()
        logger.info(
            "Task API ready env=%s db=%s tables=%d records=%d",
            settings.app_env,
            info["path"],
            len(info["tables"]),
            info["totalRecords"],
        )
        yield
        logger.info("Task API shutting down")

    app = FastAPI(title="Task Control API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.task_service = TaskService(repository)

    @app.exception_handler(PersistError)
    async def _persist_failed(request: Request, exc: PersistError):
        logger.error("Persist failure on %s %s: %s", request.method, request.url.path, exc)
        return error_response(500, "Failed to persist changes")

    @app.exception_handler(UninitializedError)
    async def _not_ready(request: Request, exc: UninitializedError):
        return error_response(503, str(exc))

    app.include_router(health_router.router)
    app.include_router(database_router.router)
    app.include_router(tasks_router.router)
    return app


app = create_app()
