"""
Shared route dependencies.
"""
from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session
from splitchain.core.exceptions import GroupNotFoundError
from splitchain.db.session import get_db
from splitchain.models.group import Group
from splitchain.services import group_service
from splitchain.services.transfer_service import HttpTransferClient


def get_group_or_404(group_id: int, db: Session = Depends(get_db)) -> Group:
    """Resolve the group in the path or fail with 404."""
    try:
        return group_service.get_group(group_id, db)
    except GroupNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )


def get_transfer_client() -> HttpTransferClient:
    """Dependency for the value-transfer client."""
    return HttpTransferClient()
