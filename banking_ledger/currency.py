"""
Amount Handling Module

Parsing, rounding and display of monetary amounts. All amounts are
Decimal quantized to cents. NEVER uses float for monetary values.
"""

from decimal import Decimal, Inexact, InvalidOperation, ROUND_HALF_UP, getcontext, localcontext
from typing import Union
import re

from .errors import InvalidAmountError

# Set global decimal context for financial precision
getcontext().prec = 28

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')

# Largest accepted amount and balance; sums of two stay exact at prec 28
MAX_AMOUNT = Decimal('999999999999999999.99')

# Plain digits or comma-grouped thousands, optional fraction of up to 2 digits
_AMOUNT_PATTERN = re.compile(
    r'^(?:\d+|\d{1,3}(?:,\d{3})+)?(?:\.(\d*))?$',
    re.ASCII,
)

AmountInput = Union[str, int, Decimal]


def quantize_amount(value: Decimal) -> Decimal:
    """Round a Decimal to cent precision"""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def exact_sum(a: Decimal, b: Decimal) -> Decimal:
    """
    Add two amounts, refusing to round

    Raises:
        decimal.Inexact: If the result does not fit the context precision
    """
    with localcontext() as ctx:
        ctx.traps[Inexact] = True
        return a + b


def parse_amount(value: AmountInput, error_cls=InvalidAmountError,
                 max_amount: Decimal = MAX_AMOUNT) -> Decimal:
    """
    Convert raw input into a positive cent-scale Decimal

    Args:
        value: Text typed by the user, or a Decimal/int from code
        error_cls: Exception class raised on rejection
        max_amount: Largest amount accepted

    Returns:
        Decimal quantized to cents

    Raises:
        InvalidAmountError: If the value is not a positive finite amount
            with at most two fractional digits, or exceeds max_amount
    """
    # bool is an int subclass and float would carry binary rounding error
    if isinstance(value, (bool, float)):
        raise error_cls(value, "amount must be text, an integer or a Decimal")

    if isinstance(value, str):
        text = value.strip()
        match = _AMOUNT_PATTERN.match(text)
        if not text or text == '.' or not match:
            raise error_cls(value, "not a valid monetary value")
        fraction = match.group(1)
        if fraction is not None and len(fraction) > 2:
            raise error_cls(value, "more than two decimal places")
        try:
            amount = Decimal(text.replace(',', ''))
        except InvalidOperation:
            raise error_cls(value, "not a valid monetary value")
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, Decimal):
        if not value.is_finite():
            raise error_cls(value, "amount must be finite")
        amount = value
    else:
        raise error_cls(value, "amount must be text, an integer or a Decimal")

    if amount <= 0:
        raise error_cls(value, "amount must be greater than zero")
    if amount > max_amount:
        raise error_cls(value, f"amount too large, the maximum is {max_amount}")

    try:
        quantized = quantize_amount(amount)
    except InvalidOperation:
        raise error_cls(value, "amount too large")
    if quantized != amount:
        raise error_cls(value, "more than two decimal places")
    return quantized


def format_amount(amount: Decimal, symbol: str = "$") -> str:
    """Format for display, e.g. $1,234.56"""
    return f"{symbol}{quantize_amount(amount):,.2f}"
