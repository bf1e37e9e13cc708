"""
FastAPI routers grouped by domain (tasks, health, database).

Each file exposes an APIRouter included by `task_api.app.create_app`.
"""
