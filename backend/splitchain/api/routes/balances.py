"""
Balance and simplified-debt routes.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from splitchain.api.dependencies import get_group_or_404
from splitchain.api.errors import to_http_exception
from splitchain.core.exceptions import LedgerError
from splitchain.core.utils import normalize_address
from splitchain.db.session import get_db
from splitchain.models.group import Group
from splitchain.schemas.balance import BalancesResponse, DebtResponse
from splitchain.services.balance_service import get_balances
from splitchain.services.debt_service import simplify_debts, debts_for_member, build_summary

router = APIRouter(prefix="/balances", tags=["balances"])


def _to_debt_responses(debts) -> List[DebtResponse]:
    return [
        DebtResponse(from_address=d.debtor, to_address=d.creditor, amount=d.amount)
        for d in debts
    ]


@router.get("/{group_id}", response_model=BalancesResponse)
async def get_group_balances(
    member: Optional[str] = Query(None, description="Only show debts involving this member"),
    group: Group = Depends(get_group_or_404),
    db: Session = Depends(get_db)
):
    """Net balances, simplified debts and a summary for a group."""
    try:
        balances = get_balances(group.id, db)
        debts = simplify_debts(balances)
    except LedgerError as e:
        raise to_http_exception(e)

    if member:
        try:
            debts = debts_for_member(debts, normalize_address(member))
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return BalancesResponse(
        group_id=group.id,
        members=list(balances),
        balances=list(balances.values()),
        debts=_to_debt_responses(debts),
        summary=build_summary(balances, debts)
    )


@router.get("/{group_id}/debts", response_model=List[DebtResponse])
async def get_simplified_debts(
    group: Group = Depends(get_group_or_404),
    db: Session = Depends(get_db)
):
    """Minimal list of transfers that settles the group."""
    try:
        return _to_debt_responses(simplify_debts(get_balances(group.id, db)))
    except LedgerError as e:
        raise to_http_exception(e)
