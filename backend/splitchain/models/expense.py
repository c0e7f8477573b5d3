"""
Expense model for tracking shared spending.
"""
from sqlalchemy import Column, String, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from splitchain.db.base import BaseModel
from splitchain.db.types import BaseUnitAmount
from splitchain.core.money import split_equally


class Expense(BaseModel):
    """Expense model representing a single payment split among participants."""
    __tablename__ = "expenses"

    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    payer_address = Column(String(42), nullable=False, index=True)
    amount = Column(BaseUnitAmount, nullable=False)  # Base units
    description = Column(Text, nullable=False)

    # Relationships
    group = relationship("Group", back_populates="expenses")
    participants = relationship(
        "ExpenseParticipant",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseParticipant.id"
    )

    @property
    def participant_addresses(self):
        return [p.member_address for p in self.participants]

    @property
    def share(self) -> int:
        """Floor-divided share owed by each participant."""
        return split_equally(self.amount, len(self.participants))[0]

    @property
    def rounding_remainder(self) -> int:
        """Base units credited to no one because of floor division."""
        return split_equally(self.amount, len(self.participants))[1]


class ExpenseParticipant(BaseModel):
    """Junction table for Expense and member many-to-many relationship."""
    __tablename__ = "expense_participants"

    expense_id = Column(Integer, ForeignKey("expenses.id"), nullable=False, index=True)
    member_address = Column(String(42), nullable=False, index=True)

    # Relationships
    expense = relationship("Expense", back_populates="participants")

    __table_args__ = (
        UniqueConstraint('expense_id', 'member_address', name='uq_expense_participant'),
    )
