"""
Pydantic schemas for Settlement entity.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from splitchain.schemas.common import Address, Amount


class SettlementCreate(BaseModel):
    """Schema for recording a completed transfer."""
    from_address: Address
    to_address: Address
    amount: Amount
    external_ref: Optional[str] = Field(default=None, max_length=100)


class SettlementExecute(BaseModel):
    """Schema for executing a transfer through the transfer service."""
    from_address: Address
    to_address: Address
    amount: Amount


class SettlementResponse(BaseModel):
    """Schema for settlement response."""
    id: int
    group_id: int
    from_address: str
    to_address: str
    amount: Amount
    external_ref: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class SettledEvent(BaseModel):
    """A DebtSettled event emitted by the contract."""
    reference: str
    group_id: int
    debtor: Address
    creditor: Address
    amount: Amount


class ReconcileRequest(BaseModel):
    """Schema for replaying contract settlement events."""
    events: List[SettledEvent]


class ReconcileResponse(BaseModel):
    """Schema for reconciliation results."""
    recorded: List[str]
    already_recorded: List[str]
