"""
Settlement ledger: the record of completed value transfers.

The ledger records what the value-authoritative side confirms. It never
checks an amount against the current debt, so it can reflect a completed
transfer but never block or reverse one.
"""
import logging
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from splitchain.core.exceptions import (
    DuplicateReferenceError, InvalidAmountError, LedgerError, SelfSettlementError
)
from splitchain.core.money import require_positive
from splitchain.models.settlement import Settlement
from splitchain.services import group_service

logger = logging.getLogger(__name__)


def list_settlements(group_id: int, db: Session) -> List[Settlement]:
    """Settlements of a group, oldest first."""
    return db.query(Settlement).filter(
        Settlement.group_id == group_id
    ).order_by(Settlement.created_at, Settlement.id).all()


def find_by_reference(external_ref: str, db: Session) -> Optional[Settlement]:
    return db.query(Settlement).filter(Settlement.external_ref == external_ref).first()


def validate_settlement(
    group_id: int,
    from_address: str,
    to_address: str,
    amount: int,
    db: Session
) -> None:
    """Check a settlement's amount, parties and group without writing anything."""
    try:
        require_positive(amount)
    except InvalidAmountError:
        logger.warning(f"Rejected settlement with invalid amount {amount!r} in group {group_id}")
        raise
    if from_address == to_address:
        raise SelfSettlementError("Cannot settle with yourself")
    group_service.require_members(group_id, [from_address, to_address], db)


def record_settlement(
    group_id: int,
    from_address: str,
    to_address: str,
    amount: int,
    external_ref: Optional[str],
    db: Session
) -> Settlement:
    """
    Record a completed transfer from `from_address` to `to_address`.

    Raises DuplicateReferenceError when `external_ref` is already on file.
    The unique constraint on the reference column is what makes this hold
    for concurrent writers; the lookup only produces the error earlier.
    """
    validate_settlement(group_id, from_address, to_address, amount, db)

    if external_ref is not None and find_by_reference(external_ref, db):
        logger.warning(f"Duplicate settlement reference {external_ref} in group {group_id}")
        raise DuplicateReferenceError(external_ref)

    settlement = Settlement(
        group_id=group_id,
        from_address=from_address,
        to_address=to_address,
        amount=amount,
        external_ref=external_ref
    )
    db.add(settlement)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if external_ref is None:
            raise
        logger.warning(f"Concurrent duplicate settlement reference {external_ref} in group {group_id}")
        raise DuplicateReferenceError(external_ref)
    db.refresh(settlement)

    logger.info(
        f"Recorded settlement {settlement.id} in group {group_id}: "
        f"{from_address} -> {to_address} {amount} (ref={external_ref})"
    )
    return settlement


def execute_settlement(
    group_id: int,
    from_address: str,
    to_address: str,
    amount: int,
    transfer_client,
    db: Session
) -> Settlement:
    """
    Move value through the transfer primitive, then record what it confirmed.

    Preconditions are checked before any value moves. Transfer failures
    propagate unchanged; retrying is the caller's decision, and a retried
    transfer that re-reports the same reference is caught as a duplicate.
    """
    validate_settlement(group_id, from_address, to_address, amount, db)

    receipt = transfer_client.transfer(from_address, to_address, amount)
    try:
        return record_settlement(
            group_id,
            from_address,
            to_address,
            receipt.confirmed_amount,
            receipt.reference,
            db
        )
    except LedgerError as e:
        logger.error(
            f"Transfer {receipt.reference} of {receipt.confirmed_amount} from {from_address} "
            f"to {to_address} in group {group_id} completed but was not recorded: {e}"
        )
        raise
