"""
Pydantic schemas for Expense entity.
"""
from pydantic import BaseModel, Field, model_validator
from typing import List
from datetime import datetime
from splitchain.core.exceptions import InvalidAmountError
from splitchain.core.money import parse_amount
from splitchain.schemas.common import Address, Amount


class ExpenseCreate(BaseModel):
    """
    Schema for expense creation.

    Exactly one of `amount` in base units or `amount_decimal` in whole tokens
    (e.g. "0.15") must be given.
    """
    payer_address: Address
    amount: Amount
    description: str = Field(min_length=1)
    participant_addresses: List[Address]

    @model_validator(mode="before")
    @classmethod
    def convert_decimal_amount(cls, data):
        """Convert amount_decimal to exact base units."""
        if isinstance(data, dict) and "amount" in data and "amount_decimal" in data:
            raise ValueError("Give either amount or amount_decimal, not both")
        if isinstance(data, dict) and "amount_decimal" in data:
            data = dict(data)
            try:
                data["amount"] = parse_amount(data.pop("amount_decimal"))
            except InvalidAmountError as e:
                raise ValueError(str(e))
        return data


class ExpenseResponse(BaseModel):
    """Schema for expense response."""
    id: int
    group_id: int
    payer_address: str
    amount: Amount
    description: str
    participant_addresses: List[str] = []
    share: Amount  # Each participant's floor-divided share
    rounding_remainder: Amount  # Base units credited to no one
    created_at: datetime

    class Config:
        from_attributes = True
