"""
Group model for shared-expense rosters.
"""
from sqlalchemy import Column, String, Boolean, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from splitchain.db.base import BaseModel


class Group(BaseModel):
    """Group model representing a roster of members sharing expenses."""
    __tablename__ = "groups"

    name = Column(String(200), nullable=False)
    creator_address = Column(String(42), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    members = relationship(
        "GroupMember",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="GroupMember.id"
    )
    expenses = relationship("Expense", back_populates="group", cascade="all, delete-orphan")
    settlements = relationship("Settlement", back_populates="group")

    @property
    def member_addresses(self):
        """Member addresses in join order."""
        return [m.member_address for m in self.members]


class GroupMember(BaseModel):
    """Junction table for a group and a member address."""
    __tablename__ = "group_members"

    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    member_address = Column(String(42), nullable=False, index=True)

    # Relationships
    group = relationship("Group", back_populates="members")

    # Membership is a set: one row per address per group
    __table_args__ = (
        UniqueConstraint('group_id', 'member_address', name='uq_group_member'),
    )
