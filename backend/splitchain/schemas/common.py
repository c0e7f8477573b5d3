"""
Shared field types for request and response schemas.
"""
from decimal import Decimal
from typing import Annotated
from pydantic import AfterValidator, BeforeValidator, PlainSerializer
from splitchain.core.utils import normalize_address


def _coerce_base_units(value):
    """Accept ints or digit strings; floats never reach the ledger."""
    if isinstance(value, (bool, float, Decimal)):
        raise ValueError("Amounts must be integer base units")
    if isinstance(value, str):
        text = value.strip()
        if not text.lstrip("-").isdigit():
            raise ValueError(f"Invalid base-unit amount: {value}")
        return int(text)
    return value


# Base-unit amounts travel as digit strings in JSON (they exceed 2**53)
Amount = Annotated[
    int,
    BeforeValidator(_coerce_base_units),
    PlainSerializer(str, return_type=str, when_used="json"),
]

Address = Annotated[str, AfterValidator(normalize_address)]
