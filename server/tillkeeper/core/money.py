"""
Money parsing and denomination helpers.

Amounts arrive from the front end as numbers or numeric strings. They are
parsed into Decimal without ever coercing a bad value to zero.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Mapping, Optional

from tillkeeper.core.exceptions import ValidationError

CENT = Decimal("0.01")

# Largest value a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal("9999999999.99")
MAX_DENOMINATION_COUNT = 1_000_000

# Bills then coins, largest first
BILL_DENOMINATIONS = ["1000", "500", "200", "100", "50", "20"]
COIN_DENOMINATIONS = ["10", "5", "1", "0.25", "0.10", "0.05"]
DENOMINATIONS = BILL_DENOMINATIONS + COIN_DENOMINATIONS

_DENOMINATION_VALUES = {Decimal(label): label for label in DENOMINATIONS}


def parse_amount(
    value: Any,
    field_name: str = "amount",
    allow_zero: bool = True,
    required: bool = True,
) -> Optional[Decimal]:
    """
    Parse a monetary value from user input.

    Args:
        value: Number, numeric string or Decimal
        field_name: Name used in error messages
        allow_zero: Whether 0 is accepted (False for drops and pickups)
        required: Whether a missing value is an error

    Returns:
        Decimal quantized to cents, or None when not required and missing

    Raises:
        ValidationError: If the value is missing, not a finite number, negative
            or too large to store
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise ValidationError(f"{field_name} is required", code="INVALID_AMOUNT")
        return None

    # bool is an int subclass; True must not become 1
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field_name}: must be a number", code="INVALID_AMOUNT")

    try:
        if isinstance(value, float):
            amount = Decimal(repr(value))
        else:
            amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid {field_name}: must be a number", code="INVALID_AMOUNT")

    if not amount.is_finite():
        raise ValidationError(f"Invalid {field_name}: must be a number", code="INVALID_AMOUNT")

    if amount < 0:
        raise ValidationError(f"{field_name} cannot be negative", code="INVALID_AMOUNT")

    if not allow_zero and amount == 0:
        raise ValidationError(f"{field_name} must be greater than zero", code="INVALID_AMOUNT")

    if amount > MAX_AMOUNT:
        raise ValidationError(f"{field_name} is too large", code="INVALID_AMOUNT")

    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value: Any) -> Decimal:
    """Coerce a stored numeric value (Decimal, int, float, str or None) to Decimal."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(str(value))


def normalize_denomination_counts(counts: Optional[Mapping[Any, Any]]) -> Dict[str, int]:
    """
    Validate a denomination tally and return it keyed by canonical label.

    Keys may be labels ("0.25") or numbers (0.25, 1000). Every supported
    denomination is present in the result, missing ones counted as 0.
    """
    normalized = {label: 0 for label in DENOMINATIONS}
    if not counts:
        return normalized

    for key, count in counts.items():
        try:
            label = _DENOMINATION_VALUES.get(Decimal(str(key).strip()))
        except (InvalidOperation, ValueError):
            label = None
        if label is None:
            raise ValidationError(f"Unsupported denomination: {key}", code="INVALID_DENOMINATION")

        if isinstance(count, bool) or not isinstance(count, (int, str, float)):
            raise ValidationError(f"Invalid count for {label}", code="INVALID_DENOMINATION")
        try:
            parsed = Decimal(str(count).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(f"Invalid count for {label}", code="INVALID_DENOMINATION")
        if not parsed.is_finite() or parsed != parsed.to_integral_value() or parsed < 0:
            raise ValidationError(
                f"Count for {label} must be a non-negative whole number",
                code="INVALID_DENOMINATION",
            )
        if parsed > MAX_DENOMINATION_COUNT:
            raise ValidationError(f"Count for {label} is too large", code="INVALID_DENOMINATION")
        normalized[label] = int(parsed)

    return normalized


def denomination_total(counts: Optional[Mapping[str, int]]) -> Decimal:
    """Sum of value x count over a denomination tally."""
    if not counts:
        return Decimal("0.00")
    total = sum(
        (Decimal(str(label)) * int(count) for label, count in counts.items()),
        Decimal("0"),
    )
    return total.quantize(CENT)


def format_money(amount: Any, symbol: str = "₱") -> str:
    """Format an amount for log lines, e.g. -10 -> '-₱10.00'."""
    value = to_decimal(amount).quantize(CENT)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"
