"""Currency amount parsing"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from swiftpay.constants import CENTS
from swiftpay.utils.errors import InvalidAmountError


def parse_amount(value: Any, field: str = "amount") -> Decimal:
    """
    Convert user input into a positive amount quantized to cents.

    Accepts Decimal, int, float and numeric strings.

    Raises:
        InvalidAmountError: For non-numeric, non-finite, boolean, zero,
            negative, or sub-cent amounts
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmountError(f"{field} must be a number")

    try:
        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, int):
            amount = Decimal(value)
        elif isinstance(value, float):
            amount = Decimal(str(value))
        elif isinstance(value, str):
            amount = Decimal(value.strip())
        else:
            raise InvalidAmountError(f"{field} must be a number")

        if not amount.is_finite():
            raise InvalidAmountError(f"{field} must be finite")

        amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmountError(f"{field} must be a number, got {value!r}")

    if amount <= 0:
        raise InvalidAmountError(f"{field} must be greater than 0")
    return amount
