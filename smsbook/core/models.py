"""Pydantic models for the SMS ledger.

This module defines the message, verdict and transaction models that flow through the classifier and the extraction
pipeline. Intermediate models are frozen: they are scoped to one message and never mutated after creation.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CURRENCY = "INR"


class RawMessage(BaseModel):
    """An incoming SMS as delivered by the SMS listener."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    sender: str = Field(default="", alias="address")
    body: str = ""

    @field_validator("sender", "body", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return "" if value is None else value


class AmountCandidate(BaseModel):
    """A currency amount matched in an SMS body."""

    model_config = ConfigDict(frozen=True)

    value: Decimal
    currency: str | None = None
    context_snippet: str
    position: int


class RejectionReason(StrEnum):
    """Reasons the heuristic classifier rejects a message."""

    EMPTY_BODY = "Empty SMS body"
    SENDER_NOT_WHITELISTED = "Sender not in whitelist"
    OTP = "OTP detected"
    PAYMENT_REMINDER = "Payment reminder detected"
    CARD_PAYMENT_ACK = "Credit card payment acknowledgement"
    NO_AMOUNT = "No transaction amount found"
    MULTIPLE_AMOUNTS = "Multiple amount candidates"
    MISSING_DIRECTION = "Missing debit/credit keywords"


class Rejected(BaseModel):
    """Heuristic verdict for a message that is not a transaction."""

    model_config = ConfigDict(frozen=True)

    status: Literal["rejected"] = "rejected"
    reason: RejectionReason
    normalized_sender: str
    normalized_body: str


class Approved(BaseModel):
    """Heuristic verdict for a message that looks like a transaction."""

    model_config = ConfigDict(frozen=True)

    status: Literal["approved"] = "approved"
    amount: Decimal = Field(gt=0)
    currency: str = DEFAULT_CURRENCY
    is_income: bool
    normalized_sender: str
    normalized_body: str

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the inferred direction applied (negative for debits)."""
        return self.amount if self.is_income else -self.amount


HeuristicVerdict = Rejected | Approved


def coerce_decimal(value: object) -> Decimal | None:
    """Coerce a number or numeric string into a Decimal, or return None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    try:
        result = Decimal(str(value).replace(",", "").strip())
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


class ModelExtraction(BaseModel):
    """Structured record returned by the chat-completions model."""

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    amount: Decimal | None = None
    category: str | None = None
    date: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: object) -> Decimal | None:
        return coerce_decimal(value)

    @field_validator("title", "category", "date", mode="before")
    @classmethod
    def _stringify(cls, value: object) -> str | None:
        if value is None:
            return None
        return str(value).strip()


class ReconciledExtraction(BaseModel):
    """Model output merged with the heuristic verdict."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    amount: Decimal
    currency: str
    category_name: str | None = None
    date: datetime


class PersistableTransaction(BaseModel):
    """Final record handed to the database layer."""

    name: str
    amount: float
    note: str
    category_fk: str
    wallet_fk: str
    date_created: datetime
    transaction_date: datetime
    income: bool
    paid: bool = True


class ProcessingOutcome(BaseModel):
    """Result of running one message through the pipeline."""

    status: Literal["inserted", "duplicate", "rejected", "skipped", "failed"]
    reason: str | None = None
    transaction_pk: str | None = None


class SmsEvent(BaseModel):
    """Request body for an inbound SMS."""

    address: str | None = None
    body: str | None = None

    def to_message(self) -> RawMessage:
        """Convert the event into a RawMessage."""
        return RawMessage(address=self.address, body=self.body)
