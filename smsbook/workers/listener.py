"""Entry points the SMS listener calls for each incoming message.

The foreground entry point reuses the caller's database handle and settings. The background entry point runs on a
cold start: it opens its own handle, loads the stored app settings, processes the message and closes the handle.
Neither lets an exception escape, so the listener keeps working whatever happens to one message.
"""

from pydantic import ValidationError

from smsbook.core.db import DBHelper, get_db
from smsbook.core.models import ProcessingOutcome, RawMessage, SmsEvent
from smsbook.core.settings import AppSettings
from smsbook.core.utils import get_logger
from smsbook.workers.sms_processor import SmsProcessor

logger = get_logger("sms-ledger.listener")


def _to_message(event: SmsEvent | RawMessage) -> RawMessage:
    return event.to_message() if isinstance(event, SmsEvent) else event


def on_foreground_message(
    event: SmsEvent | RawMessage,
    db: DBHelper,
    app_settings: AppSettings,
    processor: SmsProcessor | None = None,
) -> ProcessingOutcome:
    """Handle a message delivered while the app is running."""
    logger.info("Foreground SMS received")
    processor = processor or SmsProcessor()
    try:
        return processor.process(_to_message(event), db, app_settings)
    except Exception as exc:
        logger.exception("Error processing SMS")
        return ProcessingOutcome(status="failed", reason=str(exc))


def on_background_message(event: SmsEvent | RawMessage, processor: SmsProcessor | None = None) -> ProcessingOutcome:
    """Handle a message delivered on a cold start, with a database handle of its own."""
    logger.info("Background SMS received")
    try:
        db = get_db()
    except Exception as exc:
        logger.exception("Could not open database for background SMS")
        return ProcessingOutcome(status="failed", reason=str(exc))
    logger.info("Background DB opened")
    try:
        raw_settings = db.load_app_settings()
        if raw_settings is None:
            logger.warning("Background: no app settings found in DB")
            return ProcessingOutcome(status="skipped", reason="No app settings found")
        try:
            app_settings = AppSettings.model_validate(raw_settings)
        except ValidationError as exc:
            logger.error(f"Background: invalid app settings: {exc}")
            return ProcessingOutcome(status="failed", reason="Invalid app settings")
        processor = processor or SmsProcessor()
        return processor.process(_to_message(event), db, app_settings)
    except Exception as exc:
        logger.exception("Error in background SMS processing")
        return ProcessingOutcome(status="failed", reason=str(exc))
    finally:
        db.close()
        logger.info("Background DB closed")
