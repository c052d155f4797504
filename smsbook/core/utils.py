"""Shared utility functions for the SMS ledger."""

import logging
from datetime import UTC, datetime
from pathlib import Path

import colorlog


def get_logger(name: str) -> logging.Logger:
    """Get a logger with a colorized format for the project.

    Handlers live on the top-level project logger only; ``sms-ledger.worker`` and friends propagate to it, so a
    file handler added by the entrypoint sees every module's records.
    """
    logger = logging.getLogger(name.split(".", 1)[0])
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    logger.propagate = False
    return logging.getLogger(name)


def ensure_dir(path: str | Path) -> None:
    """Ensure a directory exists (like mkdir -p)."""
    Path(path).mkdir(parents=True, exist_ok=True)


def utcnow() -> datetime:
    """Get the current UTC time as a naive datetime, as stored by the database."""
    return datetime.now(UTC).replace(tzinfo=None)


def parse_iso_datetime(value: str | None) -> datetime | None:
    """Parse an ISO8601 string into a naive UTC datetime, or return None."""
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


def truncate(text: str, limit: int) -> str:
    """Shorten text for log lines."""
    return text if len(text) <= limit else text[: limit - 3] + "..."
