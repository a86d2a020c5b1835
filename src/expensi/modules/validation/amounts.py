from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal

from expensi.core.currencies import format_currency, round_half_up

LARGE_AMOUNT_THRESHOLD = 10_000
MAX_DECIMAL_DIGITS = 2


class AmountWarningType(str, enum.Enum):
    LARGE_AMOUNT = "large_amount"
    EXCESSIVE_DECIMALS = "excessive_decimals"
    POSSIBLE_DECIMAL_ERROR = "possible_decimal_error"


@dataclass(frozen=True)
class AmountWarning:
    type: AmountWarningType
    message: str
    suggested_amount: float | None = None


def validate_amount(amount: float) -> list[AmountWarning]:
    """Flag amounts worth a second look. Advisory only; nothing is rejected.

    - over 10,000
    - more than two decimal digits
    - a round amount between 1,000 and 9,999 that reads like cents typed
      without the decimal point (1500 for 15.00)
    """
    warnings: list[AmountWarning] = []

    if amount > LARGE_AMOUNT_THRESHOLD:
        warnings.append(
            AmountWarning(type=AmountWarningType.LARGE_AMOUNT, message="Unusually large amount")
        )

    if _decimal_digits(amount) > MAX_DECIMAL_DIGITS:
        warnings.append(
            AmountWarning(
                type=AmountWarningType.EXCESSIVE_DECIMALS,
                message="Amount will be rounded to 2 decimals",
            )
        )

    if amount >= 1000 and amount % 100 == 0 and amount / 100 < 100:
        suggested = amount / 100
        warnings.append(
            AmountWarning(
                type=AmountWarningType.POSSIBLE_DECIMAL_ERROR,
                message=(
                    f"Did you mean {format_currency(suggested, 'USD')} "
                    f"instead of {format_currency(amount, 'USD')}?"
                ),
                suggested_amount=suggested,
            )
        )

    return warnings


def round_amount(amount: float) -> float:
    """Round to exactly 2 decimals, half away from zero."""
    return round_half_up(amount, 2)


def _decimal_digits(amount: float) -> int:
    # The shortest round-trip text avoids float artifacts from scaling by 100.
    if isinstance(amount, Decimal):
        text = format(amount, "f")
    elif isinstance(amount, float) and amount.is_integer():
        return 0
    else:
        text = repr(amount)
    if "e" in text or "E" in text or "." not in text:
        return 0
    return len(text.split(".", 1)[1])
