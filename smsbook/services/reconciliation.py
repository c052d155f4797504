"""Merge the model's structured record with the heuristic verdict.

The heuristic owns the direction: whatever sign the model gives, the final amount is positive for income and
negative otherwise. The model owns the magnitude when it supplies a usable amount.
"""

from datetime import datetime

from smsbook.core.errors import ExtractionValidationError
from smsbook.core.models import Approved, ModelExtraction, ReconciledExtraction
from smsbook.core.utils import parse_iso_datetime, utcnow


def reconcile(extraction: ModelExtraction, verdict: Approved, now: datetime | None = None) -> ReconciledExtraction:
    """Validate the model record and apply the heuristic's amount and direction rules."""
    now = now or utcnow()
    heuristic_amount = verdict.signed_amount
    if extraction.amount is None and not heuristic_amount:
        msg = "Neither the model nor the heuristic produced an amount"
        raise ExtractionValidationError(msg)
    if not extraction.title:
        msg = "Model record has no title"
        raise ExtractionValidationError(msg)

    amount = extraction.amount if extraction.amount is not None else heuristic_amount
    magnitude = abs(amount)
    if magnitude == 0:
        msg = "Reconciled amount is zero"
        raise ExtractionValidationError(msg)

    date = parse_iso_datetime(extraction.date)
    if date is None or date > now:
        date = now

    return ReconciledExtraction(
        title=extraction.title,
        amount=magnitude if verdict.is_income else -magnitude,
        currency=verdict.currency,
        category_name=extraction.category or None,
        date=date,
    )
