"""
Balance service: folds expenses and settlements into net member balances.
"""
from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, List, NamedTuple, Sequence
from sqlalchemy.orm import Session
from splitchain.core.exceptions import NotAGroupMemberError
from splitchain.core.money import split_equally
from splitchain.services import group_service, expense_service, ledger_service


class ExpenseRecord(NamedTuple):
    """Plain expense record; Expense rows expose the same attributes."""
    payer_address: str
    amount: int
    participant_addresses: Sequence[str]


class SettlementRecord(NamedTuple):
    """Plain settlement record; Settlement rows expose the same attributes."""
    from_address: str
    to_address: str
    amount: int


class BalanceSnapshot(Mapping):
    """
    Immutable member -> signed balance mapping.

    Positive means the member is owed, negative means the member owes.
    Iteration follows roster order, which the debt simplifier relies on
    for its tie-break.
    """

    def __init__(self, balances: Dict[str, int]):
        self._balances = dict(balances)

    def __getitem__(self, member: str) -> int:
        return self._balances[member]

    def __iter__(self) -> Iterator[str]:
        return iter(self._balances)

    def __len__(self) -> int:
        return len(self._balances)

    def __repr__(self) -> str:
        return f"BalanceSnapshot({self._balances!r})"

    def total(self) -> int:
        """Sum of all balances; always zero for a consistent ledger."""
        return sum(self._balances.values())

    def nonzero(self) -> Dict[str, int]:
        return {m: b for m, b in self._balances.items() if b != 0}


def compute_balances(
    members: Iterable[str],
    expenses: Iterable,
    settlements: Iterable
) -> BalanceSnapshot:
    """
    Compute the net balance of every member.

    For each expense the payer is credited share * participant_count and
    every participant (the payer included, if listed) is debited one share.
    The floor-division remainder is credited to no one, so the balances
    always sum to exactly zero. Settlements move `amount` from the
    recipient's claim to the payer's debt.
    """
    balances: Dict[str, int] = {member: 0 for member in members}

    def _check(member: str):
        if member not in balances:
            raise NotAGroupMemberError(member)

    for expense in expenses:
        participants = list(expense.participant_addresses)
        if not participants:
            continue
        share, remainder = split_equally(expense.amount, len(participants))

        _check(expense.payer_address)
        for participant in participants:
            _check(participant)

        balances[expense.payer_address] += expense.amount - remainder
        for participant in participants:
            balances[participant] -= share

    for settlement in settlements:
        _check(settlement.from_address)
        _check(settlement.to_address)
        # Payer's debt shrinks, recipient's claim shrinks
        balances[settlement.from_address] += settlement.amount
        balances[settlement.to_address] -= settlement.amount

    return BalanceSnapshot(balances)


def rounding_remainders(expenses: Iterable) -> List[int]:
    """Uncredited remainder of every expense, in input order."""
    return [
        split_equally(e.amount, len(e.participant_addresses))[1]
        for e in expenses
        if e.participant_addresses
    ]


def get_balances(group_id: int, db: Session) -> BalanceSnapshot:
    """Load a group's records and compute a fresh balance snapshot."""
    members = group_service.list_members(group_id, db)
    expenses = expense_service.list_expenses(group_id, db)
    settlements = ledger_service.list_settlements(group_id, db)
    return compute_balances(members, expenses, settlements)
