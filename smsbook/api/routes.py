"""FastAPI endpoints for the SMS ledger API.

This module defines the routes for submitting incoming SMS messages for background processing, dry-running the
heuristic classifier on a message, and health checks.
"""

from fastapi import APIRouter, BackgroundTasks, Depends

from smsbook.api.dependencies import get_app_settings, get_processor
from smsbook.core.models import SmsEvent
from smsbook.core.settings import AppSettings
from smsbook.core.utils import get_logger
from smsbook.heuristics.classifier import HeuristicClassifier
from smsbook.workers.listener import on_background_message
from smsbook.workers.sms_processor import SmsProcessor

router = APIRouter()
logger = get_logger("sms-ledger.api")


@router.post(
    "/sms",
    status_code=202,
    summary="Submit an incoming SMS for processing",
    description=(
        "Queue an SMS for classification and extraction. "
        "The message is processed in the background with its own database session; "
        "rejections, duplicates and failures are logged, never returned.\n\n"
        "**Request:** `{ 'address': '<sender>', 'body': '<text>' }`\n\n"
        "**Response:**\n"
        "- 202 Accepted: `{ 'status': 'accepted' }`."
    ),
    response_description="Message accepted for background processing.",
    responses={
        202: {
            "description": "Message accepted.",
            "content": {"application/json": {"example": {"status": "accepted"}}},
        },
    },
)
async def submit_sms(
    event: SmsEvent,
    background_tasks: BackgroundTasks,
    processor: SmsProcessor = Depends(get_processor),
) -> dict:
    """Queue an SMS for background processing."""
    logger.info(f"Received SMS from '{event.address}'")
    background_tasks.add_task(on_background_message, event, processor)
    return {"status": "accepted"}


@router.post(
    "/sms/classify",
    summary="Run the heuristic classifier on an SMS",
    description=(
        "Classify an SMS with the stored sender allowlist without calling the model or writing anything.\n\n"
        "**Response:** the heuristic verdict, either `approved` with amount, currency and direction, "
        "or `rejected` with a reason."
    ),
    response_description="Heuristic verdict.",
    responses={
        200: {
            "description": "Verdict.",
            "content": {
                "application/json": {
                    "example": {
                        "status": "approved",
                        "amount": "500",
                        "currency": "INR",
                        "is_income": False,
                        "normalized_sender": "ax-icicib",
                        "normalized_body": "rs.500 debited from a/c for upi payment",
                    }
                }
            },
        },
    },
)
async def classify_sms(event: SmsEvent, app_settings: AppSettings = Depends(get_app_settings)) -> dict:
    """Return the heuristic verdict for an SMS."""
    verdict = HeuristicClassifier(app_settings.sms_sender_keywords).evaluate(event.to_message())
    return verdict.model_dump(mode="json")


@router.get(
    "/health",
    summary="Health check",
    description="Simple health check endpoint. Returns status ok.",
    response_description="Status ok.",
    responses={200: {"description": "API is healthy.", "content": {"application/json": {"example": {"status": "ok"}}}}},
)
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
