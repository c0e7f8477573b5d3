"""
Group management routes.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List
from splitchain.api.dependencies import get_group_or_404
from splitchain.api.errors import to_http_exception
from splitchain.core.exceptions import LedgerError
from splitchain.core.utils import normalize_address
from splitchain.db.session import get_db
from splitchain.models.group import Group
from splitchain.schemas.group import GroupCreate, GroupJoin, GroupResponse
from splitchain.services import group_service

router = APIRouter(prefix="/groups", tags=["groups"])


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    group_data: GroupCreate,
    db: Session = Depends(get_db)
):
    """Create a new group; the creator is added as the first member."""
    return group_service.create_group(
        group_data.name,
        group_data.creator_address,
        group_data.member_addresses,
        db
    )


@router.get("", response_model=List[GroupResponse])
async def list_groups(
    member: str = Query(..., description="Member address"),
    db: Session = Depends(get_db)
):
    """List all groups a member belongs to."""
    try:
        member = normalize_address(member)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return group_service.list_groups_for_member(member, db)


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(group: Group = Depends(get_group_or_404)):
    """Get group details with members."""
    return group


@router.post("/{group_id}/members", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def join_group(
    group_id: int,
    join_data: GroupJoin,
    db: Session = Depends(get_db)
):
    """Add a member to the group."""
    try:
        return group_service.join_group(group_id, join_data.member_address, db)
    except LedgerError as e:
        raise to_http_exception(e)
