"""
In-process restatement of the value-authoritative SplitChain contract.

The contract keeps its own per-group balances, updates them atomically when
an expense is added or a debt is settled, and derives simplified debts on its
own so callers can cross-check the off-chain ledger. When the two disagree,
the contract is canonical.
"""
import hashlib
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple
from splitchain.core.exceptions import (
    AlreadyMemberError, GroupNotFoundError, InvalidAmountError, InvalidExpenseError, NoOutstandingDebtError,
    NotAGroupMemberError, OverpaymentRejectedError, ReentrancyError, SelfSettlementError
)
from splitchain.core.money import split_equally
from splitchain.core.utils import unique_in_order
from splitchain.services.transfer_service import TransferReceipt

logger = logging.getLogger(__name__)


class ReentrancyGuard:
    """
    Non-reentrant section: one in-flight call per owner.

    Use as a context manager; entering while the section is held raises
    ReentrancyError instead of silently doing nothing.
    """

    def __init__(self):
        self._entered = False

    @property
    def locked(self) -> bool:
        return self._entered

    def __enter__(self):
        if self._entered:
            raise ReentrancyError("Reentrant call")
        self._entered = True
        return self

    def __exit__(self, exc_type, exc, tb):
        self._entered = False
        return False


@dataclass
class MirrorEvent:
    name: str
    args: Dict[str, object]
    reference: Optional[str] = None


@dataclass
class _GroupState:
    name: str
    creator: str
    active: bool = True
    members: List[str] = field(default_factory=list)
    balances: Dict[str, int] = field(default_factory=dict)
    expense_ids: List[int] = field(default_factory=list)


@dataclass
class _ExpenseState:
    group_id: int
    payer: str
    amount: int
    description: str
    timestamp: int
    participants: List[str]


TransferFn = Callable[[str, str, int], TransferReceipt]


class SplitChainMirror:
    """Contract state and ABI surface, one instance per deployment."""

    def __init__(self, transfer: Optional[TransferFn] = None):
        self._transfer = transfer or self._native_transfer
        self._guard = ReentrancyGuard()
        self._groups: Dict[int, _GroupState] = {}
        self._expenses: Dict[int, _ExpenseState] = {}
        self._user_groups: Dict[str, List[int]] = {}
        self._transfer_nonce = 0
        self.events: List[MirrorEvent] = []

    def _emit(self, event_name: str, reference: str = None, **args):
        self.events.append(MirrorEvent(event_name, args, reference))

    def _native_transfer(self, sender: str, recipient: str, value: int) -> TransferReceipt:
        self._transfer_nonce += 1
        digest = hashlib.sha256(
            f"{sender}:{recipient}:{value}:{self._transfer_nonce}".encode("utf-8")
        ).hexdigest()
        return TransferReceipt(reference=f"0x{digest}", confirmed_amount=value)

    def _group(self, group_id: int) -> _GroupState:
        group = self._groups.get(group_id)
        if group is None:
            raise GroupNotFoundError("Group does not exist")
        return group

    def _add_member(self, group_id: int, group: _GroupState, member: str):
        group.members.append(member)
        group.balances[member] = 0
        self._user_groups.setdefault(member, []).append(group_id)
        self._emit("MemberJoined", group_id=group_id, member=member)

    # Group management

    def create_group(self, caller: str, name: str, members: List[str]) -> int:
        group_id = len(self._groups) + 1
        group = _GroupState(name=name, creator=caller)
        self._groups[group_id] = group
        self._emit("GroupCreated", group_id=group_id, name=name, creator=caller)
        for member in unique_in_order([caller, *members]):
            self._add_member(group_id, group, member)
        return group_id

    def join_group(self, caller: str, group_id: int) -> None:
        group = self._group(group_id)
        if caller in group.balances:
            raise AlreadyMemberError("Already a member")
        self._add_member(group_id, group, caller)

    def get_group(self, group_id: int) -> Tuple[str, str, bool, int]:
        group = self._group(group_id)
        return group.name, group.creator, group.active, len(group.members)

    def get_group_members(self, group_id: int) -> List[str]:
        return list(self._group(group_id).members)

    def get_user_groups(self, member: str) -> List[int]:
        return list(self._user_groups.get(member, []))

    # Expenses

    def add_expense(
        self,
        caller: str,
        group_id: int,
        amount: int,
        description: str,
        participants: List[str]
    ) -> int:
        group = self._group(group_id)
        if caller not in group.balances:
            raise NotAGroupMemberError(caller, group_id)
        if amount <= 0:
            raise InvalidAmountError("Amount must be positive")
        participants = unique_in_order(participants)
        if not participants:
            raise InvalidExpenseError("Need at least one participant")
        for participant in participants:
            if participant not in group.balances:
                raise NotAGroupMemberError(participant, group_id)

        share, remainder = split_equally(amount, len(participants))
        group.balances[caller] += amount - remainder
        for participant in participants:
            group.balances[participant] -= share

        expense_id = len(self._expenses) + 1
        self._expenses[expense_id] = _ExpenseState(
            group_id=group_id,
            payer=caller,
            amount=amount,
            description=description,
            timestamp=int(time.time()),
            participants=participants
        )
        group.expense_ids.append(expense_id)
        self._emit(
            "ExpenseAdded",
            group_id=group_id,
            expense_id=expense_id,
            payer=caller,
            amount=amount,
            description=description
        )
        return expense_id

    def get_expense(self, expense_id: int) -> Tuple[int, str, int, str, int, List[str]]:
        expense = self._expenses.get(expense_id)
        if expense is None:
            raise LookupError("Expense does not exist")
        return (
            expense.group_id,
            expense.payer,
            expense.amount,
            expense.description,
            expense.timestamp,
            list(expense.participants),
        )

    def get_group_expenses(self, group_id: int) -> List[int]:
        return list(self._group(group_id).expense_ids)

    # Balances

    def get_member_balance(self, group_id: int, member: str) -> int:
        return self._group(group_id).balances.get(member, 0)

    def get_all_balances(self, group_id: int) -> Tuple[List[str], List[int]]:
        group = self._group(group_id)
        return list(group.members), [group.balances[m] for m in group.members]

    def get_simplified_debts(self, group_id: int) -> List[Tuple[str, str, int]]:
        """
        (debtor, creditor, amount) transfers that zero every balance.

        Scans for the largest remaining creditor and debtor on every step;
        the earliest member wins a tie.
        """
        group = self._group(group_id)
        remaining = [group.balances[m] for m in group.members]
        debts = []
        while True:
            creditor_idx = debtor_idx = None
            for i, balance in enumerate(remaining):
                if balance > 0 and (creditor_idx is None or balance > remaining[creditor_idx]):
                    creditor_idx = i
                if balance < 0 and (debtor_idx is None or balance < remaining[debtor_idx]):
                    debtor_idx = i
            if creditor_idx is None or debtor_idx is None:
                break
            amount = min(remaining[creditor_idx], -remaining[debtor_idx])
            debts.append((group.members[debtor_idx], group.members[creditor_idx], amount))
            remaining[creditor_idx] -= amount
            remaining[debtor_idx] += amount
        return debts

    # Settlement

    def settle(self, caller: str, group_id: int, creditor: str, value: int) -> TransferReceipt:
        """
        Pay `value` of the caller's debt to `creditor`.

        The whole call runs inside the reentrancy guard; a nested call made
        from the transfer fails with ReentrancyError. Balances are restored
        if the transfer fails.
        """
        if self._guard.locked:
            logger.warning(f"Rejected reentrant settle from {caller} in group {group_id}")
        with self._guard:
            group = self._group(group_id)
            if value <= 0:
                raise InvalidAmountError("Must send value")
            if caller == creditor:
                raise SelfSettlementError("Cannot settle with yourself")
            if creditor not in group.balances:
                raise NotAGroupMemberError(creditor, group_id)
            if caller not in group.balances:
                raise NotAGroupMemberError(caller, group_id)

            debt = -group.balances[caller]
            if debt <= 0:
                raise NoOutstandingDebtError("You don't owe anything")
            if group.balances[creditor] <= 0:
                raise NoOutstandingDebtError("Creditor is not owed anything")
            if value > debt:
                raise OverpaymentRejectedError("Cannot overpay your debt")

            group.balances[caller] += value
            group.balances[creditor] -= value
            try:
                receipt = self._transfer(caller, creditor, value)
            except Exception:
                group.balances[caller] -= value
                group.balances[creditor] += value
                raise

        self._emit(
            "DebtSettled",
            reference=receipt.reference,
            group_id=group_id,
            debtor=caller,
            creditor=creditor,
            amount=value
        )
        return receipt

    def settlement_events(self) -> List[MirrorEvent]:
        return [e for e in self.events if e.name == "DebtSettled"]
