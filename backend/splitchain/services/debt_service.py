"""
Debt simplification: turns net balances into a minimal list of transfers.
"""
import heapq
from typing import List, Mapping, NamedTuple
from splitchain.core.config import settings
from splitchain.core.exceptions import UnbalancedLedgerError
from splitchain.core.money import format_amount
from splitchain.core.utils import short_address


class SimplifiedDebt(NamedTuple):
    """A single transfer from a debtor to a creditor."""
    debtor: str
    creditor: str
    amount: int


def simplify_debts(balances: Mapping[str, int]) -> List[SimplifiedDebt]:
    """
    Minimize the number of transfers needed to settle all balances.

    Greedy largest-to-largest matching: at every step the creditor with the
    largest remaining credit is paid by the debtor with the largest remaining
    debt. Equal amounts are ordered by the iteration order of `balances`.
    Each step retires at least one party, so n nonzero members produce at
    most n - 1 transfers.
    """
    total = sum(balances.values())
    if total != 0:
        raise UnbalancedLedgerError(f"Balances sum to {total}, expected 0")

    # Heaps of (-remaining, enumeration index, member)
    creditors = []
    debtors = []
    for index, (member, balance) in enumerate(balances.items()):
        if balance > 0:
            creditors.append((-balance, index, member))
        elif balance < 0:
            debtors.append((balance, index, member))  # already negative
    heapq.heapify(creditors)
    heapq.heapify(debtors)

    debts: List[SimplifiedDebt] = []
    while creditors and debtors:
        neg_credit, cred_idx, creditor = heapq.heappop(creditors)
        neg_debt, debt_idx, debtor = heapq.heappop(debtors)
        credit, debt = -neg_credit, -neg_debt

        amount = min(credit, debt)
        if amount > 0:
            debts.append(SimplifiedDebt(debtor, creditor, amount))

        if credit > amount:
            heapq.heappush(creditors, (-(credit - amount), cred_idx, creditor))
        if debt > amount:
            heapq.heappush(debtors, (-(debt - amount), debt_idx, debtor))

    return debts


def debts_for_member(debts: List[SimplifiedDebt], member: str) -> List[SimplifiedDebt]:
    """Only the transfers in which `member` pays or receives."""
    return [d for d in debts if d.debtor == member or d.creditor == member]


def build_summary(balances: Mapping[str, int], debts: List[SimplifiedDebt]) -> str:
    """Human-readable summary of balances and transfers."""
    symbol = settings.TOKEN_SYMBOL
    summary_lines = [f"Members: {len(balances)}", "\nNet balances:"]
    for member, balance in balances.items():
        sign = "+" if balance > 0 else ""
        summary_lines.append(f"  {short_address(member)}: {sign}{format_amount(balance)} {symbol}")
    summary_lines.append("\nTransfers:")
    if not debts:
        summary_lines.append("  All settled up")
    for debt in debts:
        summary_lines.append(
            f"  {short_address(debt.debtor)} -> {short_address(debt.creditor)}: "
            f"{format_amount(debt.amount)} {symbol}"
        )
    return "\n".join(summary_lines)
