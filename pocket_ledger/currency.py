"""
Amount Handling Module

Converts user input to Decimal and formats amounts for display. Balances
are never rounded; rounding to the display precision happens only in
format_amount(). NEVER uses float for monetary values.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
from dataclasses import dataclass
from typing import Optional, Union

from .config import get_config
from .exceptions import InvalidAmountError

# Set global decimal context for financial precision
getcontext().prec = 28

AmountLike = Union[Decimal, int, float, str]

ZERO = Decimal('0')


def to_decimal(value: AmountLike) -> Decimal:
    """
    Convert an amount to Decimal.

    Floats go through str() so 0.1 becomes Decimal('0.1') rather than its
    binary expansion. Strings may carry a currency symbol and thousands
    separators ("₹1,50,000.50").

    Raises:
        InvalidAmountError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"Cannot convert {value!r} to an amount", amount=value)

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        result = decimal_from_string(value)
    else:
        raise InvalidAmountError(f"Cannot convert {value!r} to an amount", amount=value)

    if not result.is_finite():
        raise InvalidAmountError(f"Amount must be a finite number, got {value!r}", amount=value)
    return result


def decimal_from_string(value: str) -> Decimal:
    """
    Parse a display string into a Decimal.

    Only whitespace, commas and the configured currency symbol are removed.
    Commas are always treated as grouping separators, which covers both
    Indian (1,00,000) and western (100,000) grouping. Anything else must be
    valid Decimal syntax, so "1e3" is 1000 and "12abc34" is rejected.
    """
    if not value or not value.strip():
        raise InvalidAmountError("Amount must be a non-empty string", amount=value)

    symbol = get_config().currency_symbol
    clean_value = "".join(value.split()).replace(",", "")
    if symbol:
        clean_value = clean_value.replace(symbol, "")

    try:
        return Decimal(clean_value)
    except InvalidOperation:
        raise InvalidAmountError(f"Cannot convert '{value}' to an amount", amount=value)


def _group_digits(digits: str, grouping: str) -> str:
    if grouping == "indian" and len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        pairs = []
        while len(head) > 2:
            pairs.insert(0, head[-2:])
            head = head[:-2]
        if head:
            pairs.insert(0, head)
        return ",".join(pairs + [tail])
    return f"{int(digits):,}"


def format_amount(
    amount: AmountLike,
    symbol: Optional[str] = None,
    grouping: Optional[str] = None,
    precision: Optional[int] = None
) -> str:
    """
    Format an amount for display, e.g. "₹2,45,750.00".

    Defaults for symbol, grouping and precision come from the active
    configuration.
    """
    settings = get_config()
    symbol = settings.currency_symbol if symbol is None else symbol
    grouping = grouping or settings.number_grouping
    precision = settings.display_precision if precision is None else precision

    value = to_decimal(amount).quantize(Decimal('0.1') ** precision, rounding=ROUND_HALF_UP)
    sign = "-" if value < ZERO else ""
    integer_part, _, fraction = f"{abs(value):f}".partition(".")

    text = _group_digits(integer_part, grouping)
    if precision > 0:
        text = f"{text}.{fraction}"
    return f"{sign}{symbol}{text}"


@dataclass(frozen=True)
class AmountValidation:
    """Outcome of validate_amount(), suitable for showing next to a form field"""
    valid: bool
    message: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid


def validate_amount(
    amount: AmountLike,
    minimum: AmountLike = ZERO,
    maximum: Optional[AmountLike] = None
) -> AmountValidation:
    """
    Check user input before building a command.

    The amount must be strictly greater than minimum and, when maximum is
    given, not greater than maximum. Never raises.
    """
    minimum = to_decimal(minimum)
    try:
        value = to_decimal(amount)
    except InvalidAmountError:
        return AmountValidation(False, f"Amount must be greater than {minimum}")

    if value <= minimum:
        return AmountValidation(False, f"Amount must be greater than {minimum}")
    if maximum is not None and value > to_decimal(maximum):
        return AmountValidation(False, f"Amount cannot exceed {format_amount(maximum)}")
    return AmountValidation(True)
