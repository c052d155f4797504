"""Amount extraction: scan SMS text for currency amounts.

Every numeric token that is not part of an account mask, a date or a time becomes an ``AmountCandidate``, with
the currency resolved from an adjacent token when one is present.
"""

import re
from collections.abc import Iterator
from decimal import Decimal, InvalidOperation

from smsbook.core.models import AmountCandidate

RUPEE_SYMBOL = "₹"
CURRENCY_CODES: tuple[str, ...] = (
    "inr",
    "usd",
    "eur",
    "gbp",
    "aed",
    "sar",
    "qar",
    "sgd",
    "aud",
    "cad",
    "jpy",
    "myr",
)
CONTEXT_RADIUS = 20

_CODES = "|".join(("rs", *CURRENCY_CODES))
_LEAD = rf"(?:{RUPEE_SYMBOL}|\b(?:{_CODES})\.?)"
_TRAIL = rf"(?:{RUPEE_SYMBOL}|(?:{_CODES})\b)"

AMOUNT_RE = re.compile(
    rf"(?:(?P<lead>{_LEAD})\s*|(?<![\w/:.,+-]))"
    r"(?P<number>[-+]?\d[\d,]*(?:\.\d+)?)"
    rf"(?(lead)(?:/-)?|(?:\s*(?P<trail>{_TRAIL})|/-|(?![\w/:]|-\w)))",
    re.IGNORECASE,
)

# Sentence breaks bound the context window on both sides.
_BREAK_RE = re.compile(r"[.!?;](?:\s|$)|\n")
# A dot after one of these ends an abbreviation, not a sentence.
_ABBREVIATION_RE = re.compile(
    r"(?<![\w/])(?:avl|avbl|avail|bal|a/c|ac|acct|rs|inr|no|ref|txn|info)$",
    re.IGNORECASE,
)


def normalize_currency(token: str | None) -> str | None:
    """Map a matched currency token to an ISO code, or None when unresolvable."""
    if not token:
        return None
    if RUPEE_SYMBOL in token:
        return "INR"
    code = re.sub(r"[^A-Za-z]", "", token).upper()
    if code == "RS":
        return "INR"
    return code if code.lower() in CURRENCY_CODES else None


def parse_amount(number: str) -> Decimal | None:
    """Parse a numeric group after stripping grouping separators and whitespace."""
    cleaned = re.sub(r"[,\s]", "", number)
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


def _sentence_breaks(text: str, pos: int, endpos: int) -> Iterator[re.Match[str]]:
    for match in _BREAK_RE.finditer(text, pos, endpos):
        if match.group().startswith(".") and _ABBREVIATION_RE.search(text, 0, match.start()):
            continue
        yield match


def context_window(text: str, start: int, end: int, radius: int = CONTEXT_RADIUS) -> str:
    """Return up to ``radius`` characters either side of a match, clipped at sentence breaks.

    Dots that close abbreviations such as ``Avl.`` or ``Bal.`` do not count as breaks.
    """
    left_start = max(0, start - radius)
    for match in _sentence_breaks(text, left_start, start):
        left_start = match.end()
    right_end = min(len(text), end + radius)
    first_break = next(_sentence_breaks(text, end, right_end), None)
    if first_break is not None:
        right_end = first_break.start()
    return text[left_start:right_end]


def extract_amounts(body: str) -> Iterator[AmountCandidate]:
    """Yield amount candidates in order of appearance."""
    for match in AMOUNT_RE.finditer(body):
        value = parse_amount(match.group("number"))
        if value is None:
            continue
        token = match.group("lead") or match.group("trail")
        yield AmountCandidate(
            value=value,
            currency=normalize_currency(token),
            context_snippet=context_window(body, match.start(), match.end()),
            position=match.start(),
        )
