"""
Pydantic schemas for balances and simplified debts.
"""
from pydantic import BaseModel, Field
from typing import List
from splitchain.schemas.common import Amount


class DebtResponse(BaseModel):
    """A single simplified transfer."""
    from_address: str = Field(alias="from")
    to_address: str = Field(alias="to")
    amount: Amount

    model_config = {"populate_by_name": True}


class BalancesResponse(BaseModel):
    """
    Balances of a group.

    `members` and `balances` are parallel lists in roster order, the same
    shape the contract's getAllBalances returns.
    """
    group_id: int
    members: List[str]
    balances: List[Amount]
    debts: List[DebtResponse]
    summary: str
