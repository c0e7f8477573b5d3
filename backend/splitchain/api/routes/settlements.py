"""
Settlement management routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from splitchain.api.dependencies import get_group_or_404, get_transfer_client
from splitchain.api.errors import to_http_exception
from splitchain.core.exceptions import LedgerError
from splitchain.db.session import get_db
from splitchain.models.group import Group
from splitchain.schemas.settlement import (
    SettlementCreate, SettlementExecute, SettlementResponse,
    ReconcileRequest, ReconcileResponse
)
from splitchain.services import ledger_service
from splitchain.services.mirror_contract import MirrorEvent
from splitchain.services.reconciliation_service import reconcile_settlements

router = APIRouter(prefix="/settlements", tags=["settlements"])


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile(
    request: ReconcileRequest,
    db: Session = Depends(get_db)
):
    """Replay DebtSettled events from the contract into the ledger."""
    events = [
        MirrorEvent(
            name="DebtSettled",
            reference=event.reference,
            args={
                "group_id": event.group_id,
                "debtor": event.debtor,
                "creditor": event.creditor,
                "amount": event.amount,
            }
        )
        for event in request.events
    ]
    try:
        report = reconcile_settlements(events, db)
    except LedgerError as e:
        raise to_http_exception(e)
    return ReconcileResponse(recorded=report.recorded, already_recorded=report.already_recorded)


@router.get("/{group_id}", response_model=List[SettlementResponse])
async def list_settlements(
    group: Group = Depends(get_group_or_404),
    db: Session = Depends(get_db)
):
    """List the group's settlements, oldest first."""
    return ledger_service.list_settlements(group.id, db)


@router.post("/{group_id}", response_model=SettlementResponse, status_code=status.HTTP_201_CREATED)
async def record_settlement(
    settlement_data: SettlementCreate,
    group: Group = Depends(get_group_or_404),
    db: Session = Depends(get_db)
):
    """Record a transfer that already happened (409 if its reference is on file)."""
    try:
        return ledger_service.record_settlement(
            group.id,
            settlement_data.from_address,
            settlement_data.to_address,
            settlement_data.amount,
            settlement_data.external_ref,
            db
        )
    except LedgerError as e:
        raise to_http_exception(e)


@router.post("/{group_id}/execute", response_model=SettlementResponse, status_code=status.HTTP_201_CREATED)
async def execute_settlement(
    settlement_data: SettlementExecute,
    group: Group = Depends(get_group_or_404),
    transfer_client=Depends(get_transfer_client),
    db: Session = Depends(get_db)
):
    """Execute a transfer through the transfer service and record it."""
    try:
        return ledger_service.execute_settlement(
            group.id,
            settlement_data.from_address,
            settlement_data.to_address,
            settlement_data.amount,
            transfer_client,
            db
        )
    except LedgerError as e:
        raise to_http_exception(e)
