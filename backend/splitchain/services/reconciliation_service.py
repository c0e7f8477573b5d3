"""
Reconciliation between the value-authoritative contract and the ledger.

The contract is an event source; the ledger is a projection that replays
its DebtSettled events. The unique transfer reference makes every replay
idempotent.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping
from sqlalchemy.orm import Session
from splitchain.core.exceptions import DuplicateReferenceError
from splitchain.services import ledger_service

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationReport:
    recorded: List[str] = field(default_factory=list)
    already_recorded: List[str] = field(default_factory=list)


def reconcile_settlements(events: Iterable, db: Session) -> ReconciliationReport:
    """
    Record every DebtSettled event that the ledger does not have yet.

    Each event needs `reference` and `args` with group_id, debtor, creditor
    and amount. Every event is validated before the first one is written,
    so an invalid event rejects the whole batch. A DuplicateReferenceError
    means the settlement is already on file and counts as satisfied.
    """
    settled = [event for event in events if event.name == "DebtSettled"]
    for event in settled:
        ledger_service.validate_settlement(
            event.args["group_id"],
            event.args["debtor"],
            event.args["creditor"],
            event.args["amount"],
            db
        )

    report = ReconciliationReport()
    for event in settled:
        if ledger_service.find_by_reference(event.reference, db):
            report.already_recorded.append(event.reference)
            continue
        try:
            ledger_service.record_settlement(
                event.args["group_id"],
                event.args["debtor"],
                event.args["creditor"],
                event.args["amount"],
                event.reference,
                db
            )
        except DuplicateReferenceError:
            report.already_recorded.append(event.reference)
            continue
        report.recorded.append(event.reference)

    logger.info(
        f"Reconciled settlements: {len(report.recorded)} recorded, "
        f"{len(report.already_recorded)} already present"
    )
    return report


def compare_balances(advisory: Mapping[str, int], canonical: Mapping[str, int]) -> Dict[str, int]:
    """
    Per-member drift (canonical - advisory) for every member that differs.

    An empty result means the two sides agree.
    """
    drift = {}
    for member in list(canonical) + [m for m in advisory if m not in canonical]:
        difference = canonical.get(member, 0) - advisory.get(member, 0)
        if difference:
            drift[member] = difference
    if drift:
        logger.warning(f"Advisory balances drift from canonical state: {drift}")
    return drift
