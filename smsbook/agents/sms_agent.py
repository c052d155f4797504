"""SmsExtractionAgent: LLM-backed extraction of a structured transaction from an approved SMS.

The agent turns a message and its heuristic verdict into a chat-completions request, sends it through the client,
and validates the reply into a ``ModelExtraction``. A reply of ``null`` (or nothing) means the model does not
consider the message a transaction.
"""

import json
import re
from typing import Protocol

from pydantic import ValidationError

from smsbook.agents.prompts import SYSTEM_PROMPT, USER_PROMPT_LOG_LABEL, USER_PROMPT_TEMPLATE
from smsbook.core.errors import ClassificationRejected, ExtractionParseError
from smsbook.core.models import Approved, ModelExtraction, RawMessage
from smsbook.core.utils import get_logger, truncate

MAX_OUTPUT_LOG_LEN = 300

logger = get_logger("sms-ledger.agent")

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def _get_color(color: str) -> str:
    try:
        from colorlog.escape_codes import escape_codes as _codes

        return _codes.get(color, "")
    except Exception:
        return ""


class CompletionClient(Protocol):
    """Anything that can answer a system+user exchange with message content."""

    def complete(self, system_prompt: str, user_content: str) -> str:
        """Return the assistant's reply."""


def build_context(message: RawMessage, verdict: Approved) -> dict:
    """Build the heuristic context object sent alongside the SMS body, omitting null fields."""
    context = {
        "sender": message.sender or None,
        "normalizedSender": verdict.normalized_sender or None,
        "detectedAmount": float(verdict.amount),
        "signedAmountSuggestion": float(verdict.signed_amount),
        "currency": verdict.currency,
        "direction": "credit" if verdict.is_income else "debit",
    }
    return {k: v for k, v in context.items() if v is not None}


def build_user_message(message: RawMessage, verdict: Approved) -> str:
    """Combine the raw SMS body with the JSON context."""
    return USER_PROMPT_TEMPLATE.format(body=message.body, context=json.dumps(build_context(message, verdict)))


def parse_model_content(content: str) -> ModelExtraction:
    """Parse the assistant's reply into a ModelExtraction.

    Raises ``ClassificationRejected`` for an empty or ``null`` reply and ``ExtractionParseError`` when the
    reply is not a JSON object.
    """
    cleaned = _FENCE_RE.sub("", content).strip()
    if not cleaned or cleaned.lower() == "null":
        msg = "Model reported no transaction"
        raise ClassificationRejected(msg)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        msg = f"Model reply is not valid JSON: {exc}"
        raise ExtractionParseError(msg) from exc
    if data is None:
        msg = "Model reported no transaction"
        raise ClassificationRejected(msg)
    if not isinstance(data, dict):
        msg = f"Model reply is a JSON {type(data).__name__}, expected an object"
        raise ExtractionParseError(msg)
    try:
        return ModelExtraction.model_validate(data)
    except ValidationError as exc:
        msg = f"Model reply has an unexpected shape: {exc}"
        raise ExtractionParseError(msg) from exc


class SmsExtractionAgent:
    """Agent responsible for LLM-based extraction of transaction details from an SMS."""

    def __init__(self, client: CompletionClient, system_prompt: str | None = None) -> None:
        """Initialize the agent with a completion client and an optional custom system prompt."""
        self.client = client
        self.system_prompt = system_prompt or SYSTEM_PROMPT

    def extract(self, message: RawMessage, verdict: Approved) -> ModelExtraction:
        """Ask the model for a structured record of the message."""
        cyan = _get_color("cyan")
        green = _get_color("green")
        yellow = _get_color("yellow")
        reset = _get_color("reset")
        user_content = build_user_message(message, verdict)
        logger.info(f"{cyan}INPUT: {truncate(user_content, MAX_OUTPUT_LOG_LEN)}{reset}")
        logger.info(f"{yellow}PROMPT: {USER_PROMPT_LOG_LABEL}{reset}")
        logger.info(f"{yellow}AGENT: Calling LLM...{reset}")
        content = self.client.complete(self.system_prompt, user_content)
        logger.info(f"{green}OUTPUT: {truncate(content, MAX_OUTPUT_LOG_LEN)}{reset}")
        extraction = parse_model_content(content)
        logger.info(f"{green}AGENT: Extracted {extraction.model_dump()}{reset}")
        return extraction
