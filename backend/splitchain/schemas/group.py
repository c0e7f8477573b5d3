"""
Pydantic schemas for Group entity.
"""
from pydantic import BaseModel, Field
from typing import List
from datetime import datetime
from splitchain.schemas.common import Address


class GroupCreate(BaseModel):
    """Schema for group creation."""
    name: str = Field(min_length=1, max_length=200)
    creator_address: Address
    member_addresses: List[Address] = []


class GroupJoin(BaseModel):
    """Schema for joining a group."""
    member_address: Address


class GroupResponse(BaseModel):
    """Schema for group response."""
    id: int
    name: str
    creator_address: str
    is_active: bool
    member_addresses: List[str] = []
    created_at: datetime

    class Config:
        from_attributes = True
