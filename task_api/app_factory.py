"""Entry point for uvicorn/gunicorn: `uvicorn task_api.app_factory:app`."""
from task_api.app import app, create_app

__all__ = ["app", "create_app"]
