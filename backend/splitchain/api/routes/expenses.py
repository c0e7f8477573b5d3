"""
Expense management routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from splitchain.api.dependencies import get_group_or_404
from splitchain.api.errors import to_http_exception
from splitchain.core.exceptions import LedgerError
from splitchain.db.session import get_db
from splitchain.models.group import Group
from splitchain.schemas.expense import ExpenseCreate, ExpenseResponse
from splitchain.services import expense_service

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.get("/{group_id}", response_model=List[ExpenseResponse])
async def list_expenses(
    group: Group = Depends(get_group_or_404),
    db: Session = Depends(get_db)
):
    """List the group's expenses, oldest first."""
    return expense_service.list_expenses(group.id, db)


@router.post("/{group_id}", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_data: ExpenseCreate,
    group: Group = Depends(get_group_or_404),
    db: Session = Depends(get_db)
):
    """Add an expense split equally among its participants."""
    try:
        return expense_service.create_expense_with_participants(
            group_id=group.id,
            payer=expense_data.payer_address,
            amount=expense_data.amount,
            participant_addresses=expense_data.participant_addresses,
            description=expense_data.description,
            db=db
        )
    except LedgerError as e:
        raise to_http_exception(e)
