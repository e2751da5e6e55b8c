"""
Base/display denomination conversion.

All arithmetic is Decimal; floats are never accepted or produced.
Base amounts are integer strings in the smallest unit (e.g. ``uatom``),
display amounts are human-scaled strings (e.g. ``ATOM``).
"""

import re
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

from cosmoscan.constants import DISPLAY_MAX_FRACTION_DIGITS

_INTEGER_RE = re.compile(r"^-?\d+$")
_DECIMAL_RE = re.compile(r"^-?(\d+(\.\d*)?|\.\d+)$")

# Large enough for 256-bit integer balances at any sane exponent
_PRECISION = 120


def _check_exponent(exponent: int) -> int:
    if isinstance(exponent, bool) or not isinstance(exponent, int) or exponent < 0:
        raise ValueError(f"exponent must be a non-negative integer, got {exponent!r}")
    return exponent


def _parse_base(base_amount: str | int) -> Decimal:
    if isinstance(base_amount, bool):
        raise ValueError("base amount must be an integer string")
    if isinstance(base_amount, int):
        return Decimal(base_amount)
    if not isinstance(base_amount, str):
        raise ValueError(f"base amount must be an integer string, got {type(base_amount).__name__}")
    text = base_amount.strip()
    if not _INTEGER_RE.match(text):
        raise ValueError(f"base amount must be an integer string, got {base_amount!r}")
    return Decimal(text)


def _parse_display(display_amount: str | int | Decimal) -> Decimal:
    if isinstance(display_amount, bool):
        raise ValueError("display amount must be numeric")
    if isinstance(display_amount, int):
        return Decimal(display_amount)
    if isinstance(display_amount, Decimal):
        if not display_amount.is_finite():
            raise ValueError("display amount must be finite")
        return display_amount
    if not isinstance(display_amount, str):
        raise ValueError(f"display amount must be a string, got {type(display_amount).__name__}")
    text = display_amount.strip().replace(",", "")
    if not _DECIMAL_RE.match(text):
        raise ValueError(f"malformed display amount: {display_amount!r}")
    try:
        return Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"malformed display amount: {display_amount!r}") from e


def to_display(
    base_amount: str | int,
    exponent: int,
    max_fraction_digits: int = DISPLAY_MAX_FRACTION_DIGITS,
) -> str:
    """
    Convert a base-unit amount to a display string.

    Rounds half-up to at most ``max_fraction_digits`` places, trims
    trailing zeros and groups the integer part with commas.

    Args:
        base_amount: Integer amount in base units.
        exponent: Decimal exponent of the display unit.
        max_fraction_digits: Maximum fractional digits shown.

    Returns:
        Formatted display amount.

    Example:
        >>> to_display("1234567", 6)
        '1.234567'
        >>> to_display("1000000000000", 6)
        '1,000,000'
    """
    _check_exponent(exponent)
    if max_fraction_digits < 0:
        raise ValueError("max_fraction_digits must be non-negative")
    value = _parse_base(base_amount)

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        scaled = value.scaleb(-exponent)
        quantum = Decimal(1).scaleb(-max_fraction_digits)
        rounded = scaled.quantize(quantum, rounding=ROUND_HALF_UP)

    text = f"{rounded:,f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text


def to_base(display_amount: str | int | Decimal, exponent: int) -> str:
    """
    Convert a display amount to an integer string in base units.

    Thousands separators are ignored; digits beyond the exponent are
    floored away.

    Args:
        display_amount: Human-scaled amount such as ``"1,000.5"``.
        exponent: Decimal exponent of the display unit.

    Returns:
        Integer amount in base units.
    """
    _check_exponent(exponent)
    value = _parse_display(display_amount)

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        base = value.scaleb(exponent).to_integral_value(rounding=ROUND_FLOOR)

    return str(int(base))
