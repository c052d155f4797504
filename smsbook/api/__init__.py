"""API package: provides FastAPI dependencies and route definitions for the application."""

from .dependencies import get_app_settings, get_db_conn, get_processor  # noqa: F401
from .routes import router  # noqa: F401
