"""Heuristic classifier: decide whether a bank SMS is a real transaction.

The classifier runs a fixed sequence of checks on lowercased copies of the sender and body. The first failing
check produces a ``Rejected`` verdict with its reason; a message that passes every check is ``Approved`` with an
amount, a currency and a direction. It has no side effects and holds no mutable state, so one instance can serve
any number of threads.
"""

import re
from collections.abc import Iterable, Sequence

from smsbook.core.models import DEFAULT_CURRENCY, Approved, HeuristicVerdict, RawMessage, Rejected, RejectionReason
from smsbook.core.settings import DEFAULT_SENDER_KEYWORDS
from smsbook.heuristics.amounts import extract_amounts
from smsbook.heuristics.disambiguation import exclude_balance_candidates, select_candidate

OTP_RE = re.compile(
    r"\b(?:otp|one[\s-]?time\s+(?:password|passcode)|verification\s+code|security\s+code|auth(?:entication)?\s+code)\b"
)
REMINDER_RE = re.compile(r"\bdue\s+(?:on|by)\b|\bto\s+be\s+debited\b|\bwill\s+be\s+(?:debited|credited)\b")
PROCESSED_PHRASES: tuple[str, ...] = ("successfully processed", "has been processed")
CARD_PAYMENT_ACK_TERMS: tuple[str, ...] = ("credit card", "payment", "received")

CREDIT_KEYWORDS: tuple[str, ...] = ("credited", "credit", "received", "deposited", "refund", "cashback")
DEBIT_KEYWORDS: tuple[str, ...] = (
    "debited",
    "debit",
    "spent",
    "withdrawn",
    "paid",
    "sent",
    "purchase",
    "charged",
    "deducted",
)
TOP_UP_PHRASES: tuple[str, ...] = ("top-up", "topup", "top up", "recharge", "added to wallet", "loaded")


def _contains_any(text: str, needles: Iterable[str]) -> bool:
    return any(needle in text for needle in needles)


def infer_direction(body: str) -> bool:
    """Return True when a lowercased body describes incoming money."""
    has_credit = _contains_any(body, CREDIT_KEYWORDS)
    has_debit = _contains_any(body, DEBIT_KEYWORDS)
    has_top_up = _contains_any(body, TOP_UP_PHRASES)

    is_income = has_credit and not has_debit
    if "credited to beneficiary" in body:
        is_income = False
    elif (has_debit or has_top_up) and not has_credit:
        is_income = False
    elif has_credit and has_debit:
        is_income = "credited to your" in body or ("credited to a/c" in body and "beneficiary" not in body)
    return is_income


def evaluate(message: RawMessage, sender_keywords: Sequence[str] = ()) -> HeuristicVerdict:
    """Classify one SMS against the given sender allowlist (built-in list when empty)."""
    sender = message.sender.lower()
    body = message.body.lower()

    def reject(reason: RejectionReason) -> Rejected:
        return Rejected(reason=reason, normalized_sender=sender, normalized_body=body)

    if not body.strip():
        return reject(RejectionReason.EMPTY_BODY)

    keywords = [k.lower() for k in sender_keywords if k] or list(DEFAULT_SENDER_KEYWORDS)
    if not any(k in sender or k in body for k in keywords):
        return reject(RejectionReason.SENDER_NOT_WHITELISTED)

    if OTP_RE.search(body):
        return reject(RejectionReason.OTP)

    if REMINDER_RE.search(body) and not _contains_any(body, PROCESSED_PHRASES):
        return reject(RejectionReason.PAYMENT_REMINDER)

    if all(term in body for term in CARD_PAYMENT_ACK_TERMS):
        return reject(RejectionReason.CARD_PAYMENT_ACK)

    candidates = [c for c in exclude_balance_candidates(extract_amounts(body)) if c.value != 0]
    if not candidates:
        return reject(RejectionReason.NO_AMOUNT)

    selected = select_candidate(candidates)
    if selected is None:
        return reject(RejectionReason.MULTIPLE_AMOUNTS)

    if not (
        _contains_any(body, CREDIT_KEYWORDS)
        or _contains_any(body, DEBIT_KEYWORDS)
        or _contains_any(body, TOP_UP_PHRASES)
    ):
        return reject(RejectionReason.MISSING_DIRECTION)

    return Approved(
        amount=abs(selected.value),
        currency=selected.currency or DEFAULT_CURRENCY,
        is_income=infer_direction(body),
        normalized_sender=sender,
        normalized_body=body,
    )


class HeuristicClassifier:
    """Classifier bound to a fixed sender allowlist."""

    def __init__(self, sender_keywords: Sequence[str] = ()) -> None:
        """Store the allowlist, falling back to the built-in bank keywords."""
        self.sender_keywords = tuple(k.lower() for k in sender_keywords if k) or DEFAULT_SENDER_KEYWORDS

    def evaluate(self, message: RawMessage) -> HeuristicVerdict:
        """Classify one message."""
        return evaluate(message, self.sender_keywords)
