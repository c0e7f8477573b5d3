"""
Expense service for expense-related business logic.
"""
import logging
from typing import List
from sqlalchemy.orm import Session
from splitchain.core.exceptions import InvalidExpenseError
from splitchain.core.money import require_positive
from splitchain.core.utils import unique_in_order
from splitchain.models.expense import Expense, ExpenseParticipant
from splitchain.services import group_service

logger = logging.getLogger(__name__)


def create_expense_with_participants(
    group_id: int,
    payer: str,
    amount: int,
    participant_addresses: List[str],
    description: str,
    db: Session
) -> Expense:
    """
    Create an expense split equally among its participants.

    Everything is validated before anything is written; shares are derived
    from the amount on read and never stored.
    """
    require_positive(amount)
    participants = unique_in_order(participant_addresses)
    if not participants:
        raise InvalidExpenseError("An expense needs at least one participant")
    group_service.require_members(group_id, [payer, *participants], db)

    expense = Expense(
        group_id=group_id,
        payer_address=payer,
        amount=amount,
        description=description
    )
    db.add(expense)
    db.flush()

    for address in participants:
        db.add(ExpenseParticipant(expense_id=expense.id, member_address=address))

    db.commit()
    db.refresh(expense)

    if expense.rounding_remainder:
        logger.info(
            f"Expense {expense.id} leaves {expense.rounding_remainder} base units "
            f"uncredited after splitting {amount} among {len(participants)}"
        )
    logger.info(f"Created expense {expense.id} in group {group_id}: {payer} paid {amount}")
    return expense


def list_expenses(group_id: int, db: Session) -> List[Expense]:
    """Expenses of a group, oldest first."""
    return db.query(Expense).filter(
        Expense.group_id == group_id
    ).order_by(Expense.created_at, Expense.id).all()
