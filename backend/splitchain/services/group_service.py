"""
Group directory service: rosters and membership checks.
"""
import logging
from typing import List
from sqlalchemy.orm import Session
from splitchain.core.exceptions import GroupNotFoundError, AlreadyMemberError, NotAGroupMemberError
from splitchain.core.utils import unique_in_order
from splitchain.models.group import Group, GroupMember

logger = logging.getLogger(__name__)


def create_group(name: str, creator: str, member_addresses: List[str], db: Session) -> Group:
    """Create a group; the creator always becomes its first member."""
    group = Group(name=name, creator_address=creator)
    db.add(group)
    db.flush()

    for address in unique_in_order([creator, *member_addresses]):
        db.add(GroupMember(group_id=group.id, member_address=address))

    db.commit()
    db.refresh(group)
    logger.info(f"Created group {group.id} '{name}' with {len(group.members)} members")
    return group


def get_group(group_id: int, db: Session) -> Group:
    group = db.query(Group).filter(Group.id == group_id).first()
    if not group:
        raise GroupNotFoundError(f"Group {group_id} does not exist")
    return group


def list_members(group_id: int, db: Session) -> List[str]:
    """Member addresses of a group in join order."""
    get_group(group_id, db)
    rows = db.query(GroupMember.member_address).filter(
        GroupMember.group_id == group_id
    ).order_by(GroupMember.id).all()
    return [row.member_address for row in rows]


def is_member(group_id: int, member: str, db: Session) -> bool:
    return db.query(GroupMember).filter(
        GroupMember.group_id == group_id,
        GroupMember.member_address == member
    ).first() is not None


def require_members(group_id: int, members: List[str], db: Session) -> None:
    """Raise NotAGroupMemberError for the first address outside the roster."""
    roster = set(list_members(group_id, db))
    for member in members:
        if member not in roster:
            raise NotAGroupMemberError(member, group_id)


def join_group(group_id: int, member: str, db: Session) -> Group:
    """Add a member to an existing group."""
    group = get_group(group_id, db)
    if is_member(group_id, member, db):
        raise AlreadyMemberError(f"{member} is already a member of group {group_id}")

    db.add(GroupMember(group_id=group_id, member_address=member))
    db.commit()
    db.refresh(group)
    logger.info(f"{member} joined group {group_id}")
    return group


def list_groups_for_member(member: str, db: Session) -> List[Group]:
    """Groups the member belongs to, newest first."""
    return db.query(Group).join(GroupMember).filter(
        GroupMember.member_address == member
    ).order_by(Group.created_at.desc(), Group.id.desc()).all()
