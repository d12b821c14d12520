"""18-decimal fixed-point helpers.

Amounts are ints scaled by 10**18 ("wei" units). Human decimal strings are
only converted at the edges with to_units/from_units; all arithmetic stays in
ints and truncates with floor division, like the on-chain SafeDecimalMath.
Values of any size are supported, not just uint256.
"""
from decimal import Decimal, InvalidOperation

DECIMALS = 18
UNIT = 10 ** DECIMALS


def to_units(value):
    """Return `value` as an int in base units.

    Ints are taken as already scaled. Strings are read as human decimals,
    e.g. '289.01' -> 289010000000000000000. Trailing zeros past the 18th
    decimal are fine, anything else there is rejected as lossy.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a fixed-point amount: {value!r}")
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Not a fixed-point amount: {value!r}")

    try:
        d_value = Decimal(value.strip())
    except InvalidOperation:
        raise ValueError(f"Not a decimal number: {value!r}") from None
    if not d_value.is_finite():
        raise ValueError(f"Not a decimal number: {value!r}")

    sign, digits, exponent = d_value.as_tuple()
    shift = exponent + DECIMALS
    if shift < 0:
        if any(digits[shift:]):
            raise ValueError(f"More than {DECIMALS} decimal places: {value!r}")
        units = int(''.join(map(str, digits[:shift])) or '0')
    else:
        units = int(''.join(map(str, digits))) * 10 ** shift
    return -units if sign else units


def from_units(value):
    """Exact decimal string of `value` / 10**18, no exponent, no trailing zeros."""
    units = to_units(value)
    whole, fraction = divmod(abs(units), UNIT)
    text = str(whole)
    if fraction:
        text += '.' + str(fraction).zfill(DECIMALS).rstrip('0')
    return '-' + text if units < 0 else text


def multiply_decimal(x, y):
    return to_units(x) * to_units(y) // UNIT
