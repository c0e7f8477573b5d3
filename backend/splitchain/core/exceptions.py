"""
Domain-specific exceptions for the ledger.

These exceptions represent business rule violations and should be
caught in routes and converted to appropriate HTTP responses.
"""


class LedgerError(Exception):
    """Base exception for all ledger errors."""
    pass


class InvalidAmountError(LedgerError):
    """Raised when an amount is zero, negative or not an exact base-unit value."""
    pass


class InvalidExpenseError(LedgerError):
    """Raised when an expense has no participants."""
    pass


class NotAGroupMemberError(LedgerError):
    """Raised when a member outside the group's roster is referenced."""

    def __init__(self, member: str, group_id=None):
        self.member = member
        self.group_id = group_id
        if group_id is None:
            super().__init__(f"{member} is not a group member")
        else:
            super().__init__(f"{member} is not a member of group {group_id}")


UnknownMemberError = NotAGroupMemberError


class GroupNotFoundError(LedgerError):
    """Raised when a group does not exist."""
    pass


class AlreadyMemberError(LedgerError):
    """Raised when a member tries to join a group they're already in."""
    pass


class SelfSettlementError(LedgerError):
    """Raised when a settlement names the same member on both sides."""
    pass


class DuplicateReferenceError(LedgerError):
    """Raised when a transfer reference has already been recorded."""

    def __init__(self, external_ref: str):
        self.external_ref = external_ref
        super().__init__(f"Transfer reference {external_ref} already recorded")


class UnbalancedLedgerError(LedgerError):
    """Raised when balances do not sum to zero."""
    pass


class OverpaymentRejectedError(LedgerError):
    """Raised by the mirror when a payment exceeds the sender's outstanding debt."""
    pass


class NoOutstandingDebtError(LedgerError):
    """Raised by the mirror when the payer owes nothing or the creditor is owed nothing."""
    pass


class ReentrancyError(LedgerError):
    """Raised when a guarded section is entered while already in flight."""
    pass


class TransferError(LedgerError):
    """Base exception for value-transfer failures."""
    pass


class InsufficientFundsError(TransferError):
    """Raised when the payer cannot cover the transfer."""
    pass


class TransferRejectedError(TransferError):
    """Raised when the transfer service refuses or fails the transfer."""
    pass
