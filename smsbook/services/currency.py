"""Currency conversion using the user's exchange-rate tables.

Rates are units of each currency per one unit of a common base, keyed by lowercase code. The custom table
overrides the cached one code by code.
"""

from collections.abc import Mapping
from decimal import Decimal

from smsbook.core.utils import get_logger

logger = get_logger("sms-ledger.currency")

CENTS = Decimal("0.01")


def lookup_rate(code: str, custom: Mapping[str, float], cached: Mapping[str, float]) -> Decimal | None:
    """Return the rate for a currency code, custom table first, or None when unknown or zero."""
    key = code.lower()
    for table in (custom, cached):
        rate = table.get(key)
        if rate:
            return Decimal(str(rate))
    return None


def convert_amount(
    amount: Decimal,
    from_currency: str,
    to_currency: str | None,
    custom: Mapping[str, float],
    cached: Mapping[str, float],
) -> Decimal:
    """Convert ``amount`` into ``to_currency``; return it unchanged when no rate resolves."""
    if not to_currency or from_currency.lower() == to_currency.lower():
        return amount
    from_rate = lookup_rate(from_currency, custom, cached)
    to_rate = lookup_rate(to_currency, custom, cached)
    if from_rate is None or to_rate is None:
        logger.warning(f"No exchange rate for {from_currency}->{to_currency}; keeping {amount} unconverted")
        return amount
    converted = (amount * to_rate / from_rate).quantize(CENTS)
    logger.info(f"Converted {amount} {from_currency.upper()} to {converted} {to_currency.upper()}")
    return converted
