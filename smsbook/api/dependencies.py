"""FastAPI dependencies for DI (DB, app settings, processor).

This module provides dependency injection helpers so routes stay thin and tests can override collaborators.
"""

from collections.abc import Iterator

from fastapi import Depends

from smsbook.core.db import DBHelper, get_db
from smsbook.core.settings import AppSettings
from smsbook.workers.sms_processor import SmsProcessor


def get_db_conn() -> Iterator[DBHelper]:
    """Provide a database helper for the duration of a request."""
    db = get_db()
    try:
        yield db
    finally:
        db.close()


def get_app_settings(db: DBHelper = Depends(get_db_conn)) -> AppSettings:
    """Provide the stored app settings, or defaults when none are stored."""
    return AppSettings.model_validate(db.load_app_settings() or {})


def get_processor() -> SmsProcessor:
    """Provide an SmsProcessor instance for dependency injection."""
    return SmsProcessor()
