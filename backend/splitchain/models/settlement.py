"""
Settlement model for recorded value transfers.
"""
from sqlalchemy import Column, String, ForeignKey, Integer
from sqlalchemy.orm import relationship
from splitchain.db.base import BaseModel
from splitchain.db.types import BaseUnitAmount


class Settlement(BaseModel):
    """A completed value transfer that reduces a debt inside one group."""
    __tablename__ = "settlements"

    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    from_address = Column(String(42), nullable=False, index=True)
    to_address = Column(String(42), nullable=False, index=True)
    amount = Column(BaseUnitAmount, nullable=False)  # Base units
    # Transfer identifier from the value-authoritative side; NULL for legacy rows
    external_ref = Column(String(100), nullable=True, unique=True, index=True)

    # Relationships
    group = relationship("Group", back_populates="settlements")
