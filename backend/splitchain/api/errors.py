"""
Translation of domain errors into HTTP responses.
"""
from fastapi import HTTPException, status
from splitchain.core.exceptions import (
    LedgerError, InvalidAmountError, InvalidExpenseError, NotAGroupMemberError, GroupNotFoundError,
    AlreadyMemberError, SelfSettlementError, DuplicateReferenceError,
    InsufficientFundsError, TransferRejectedError
)

_STATUS_BY_ERROR = [
    (GroupNotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidAmountError, status.HTTP_400_BAD_REQUEST),
    (InvalidExpenseError, status.HTTP_400_BAD_REQUEST),
    (NotAGroupMemberError, status.HTTP_400_BAD_REQUEST),
    (SelfSettlementError, status.HTTP_400_BAD_REQUEST),
    (AlreadyMemberError, status.HTTP_409_CONFLICT),
    (DuplicateReferenceError, status.HTTP_409_CONFLICT),
    (InsufficientFundsError, status.HTTP_402_PAYMENT_REQUIRED),
    (TransferRejectedError, status.HTTP_502_BAD_GATEWAY),
]


def to_http_exception(exc: LedgerError) -> HTTPException:
    """Map a domain error to an HTTPException; unknown errors become 500."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(exc)
    )
