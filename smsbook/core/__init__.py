"""Core package: provides models, database helpers, settings, errors, and shared utilities."""

from .db import DBHelper, get_db  # noqa: F401
from .models import Approved, HeuristicVerdict, ProcessingOutcome, RawMessage, Rejected  # noqa: F401
from .settings import AppSettings, Settings  # noqa: F401
from .utils import get_logger  # noqa: F401
