"""Models package - Import all models for SQLAlchemy registration."""
from splitchain.models.group import Group, GroupMember
from splitchain.models.expense import Expense, ExpenseParticipant
from splitchain.models.settlement import Settlement

__all__ = [
    "Group",
    "GroupMember",
    "Expense",
    "ExpenseParticipant",
    "Settlement",
]
