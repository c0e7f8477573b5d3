"""
Exact base-unit money arithmetic.

Amounts inside the ledger are plain Python ints counted in the token's
indivisible base unit (wei for 18 decimals). Decimal strings are converted
here, at the boundary, and never as floats.
"""
from decimal import Decimal, InvalidOperation, localcontext
from typing import Tuple, Union
from splitchain.core.config import settings
from splitchain.core.exceptions import InvalidAmountError


def parse_amount(value: Union[str, int, Decimal], decimals: int = None) -> int:
    """
    Convert a human-readable token amount into base units.

    "0.15" with 18 decimals becomes 150000000000000000. More fractional
    digits than the token supports is an error, not a silent rounding.
    """
    if decimals is None:
        decimals = settings.TOKEN_DECIMALS
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmountError(f"Amounts must be exact, got {type(value).__name__}")
    if isinstance(value, int):
        return value * 10 ** decimals

    try:
        quantity = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    if not quantity.is_finite():
        raise InvalidAmountError(f"Invalid amount: {value!r}")

    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(quantity.as_tuple().digits) + decimals + 2)
        scaled = quantity.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise InvalidAmountError(
            f"Amount {value} has more than {decimals} decimal places"
        )
    return int(scaled)


def format_amount(base_units: int, decimals: int = None) -> str:
    """Render base units as a decimal string without trailing zeros."""
    if decimals is None:
        decimals = settings.TOKEN_DECIMALS
    sign = "-" if base_units < 0 else ""
    whole, frac = divmod(abs(base_units), 10 ** decimals)
    if not frac:
        return f"{sign}{whole}"
    frac_str = str(frac).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{frac_str}"


def require_positive(amount: int) -> int:
    """Return amount if it is a positive int, raise InvalidAmountError otherwise."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(f"Amount must be an integer number of base units, got {amount!r}")
    if amount <= 0:
        raise InvalidAmountError(f"Amount must be positive, got {amount}")
    return amount


def split_equally(amount: int, participant_count: int) -> Tuple[int, int]:
    """
    Floor-divide an amount among participants.

    Returns (share, remainder); remainder is always < participant_count and
    is credited to no one.
    """
    if participant_count <= 0:
        raise ValueError("participant_count must be positive")
    return divmod(amount, participant_count)
