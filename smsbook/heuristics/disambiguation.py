"""Pick the transaction amount out of several candidates."""

import re
from collections.abc import Iterable

from smsbook.core.models import AmountCandidate

BALANCE_RE = re.compile(
    r"\b(?:balance|bal|avl|avbl|avail|available\s+(?:credit\s+)?limit|closing\s+bal\w*|outstanding)\b",
    re.IGNORECASE,
)

TRANSACTION_CUES: tuple[str, ...] = (
    "debit",
    "credit",
    "withdrawn",
    "deposited",
    "received",
    "paid",
    "sent",
    "pos",
    "card",
    "upi",
    "transfer",
    "spent",
    "payment",
    "purchase",
    "at ",
)


def is_balance_context(snippet: str) -> bool:
    """Whether the text around an amount marks it as a balance or limit."""
    return bool(BALANCE_RE.search(snippet))


def has_transaction_cue(snippet: str) -> bool:
    """Whether the text around an amount ties it to a purchase or transfer."""
    lowered = snippet.lower()
    return any(cue in lowered for cue in TRANSACTION_CUES)


def exclude_balance_candidates(candidates: Iterable[AmountCandidate]) -> list[AmountCandidate]:
    """Drop candidates that sit in a balance context."""
    return [c for c in candidates if not is_balance_context(c.context_snippet)]


def select_candidate(candidates: Iterable[AmountCandidate]) -> AmountCandidate | None:
    """Select one candidate, or None when nothing survives balance filtering.

    Several survivors never yield None: the earliest candidate with a transaction cue wins, or the earliest
    overall when none has a cue.
    """
    remaining = exclude_balance_candidates(candidates)
    if len(remaining) <= 1:
        return remaining[0] if remaining else None
    cued = [c for c in remaining if has_transaction_cue(c.context_snippet)]
    return min(cued or remaining, key=lambda c: c.position)
