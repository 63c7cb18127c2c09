"""Domain-specific exceptions"""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure kinds surfaced by the domain calculators"""

    INVALID_AMOUNT = "InvalidAmount"
    INVALID_STATE = "InvalidState"
    INVALID_APPLICATION = "InvalidApplication"
    NOT_ALLOWED = "NotAllowed"
    INSUFFICIENT_BALANCE = "InsufficientBalance"
    INVALID_PLAN = "InvalidPlan"
    MISSING_FAMILY_DETAILS = "MissingFamilyDetails"


class DomainException(Exception):
    """Base exception for domain layer"""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidAmountError(DomainException):
    """Amount is zero or negative where a positive value is required"""

    kind = ErrorKind.INVALID_AMOUNT


class InvalidStateError(DomainException):
    """Entity is not in the lifecycle state the operation requires"""

    kind = ErrorKind.INVALID_STATE


class InvalidApplicationError(DomainException):
    """Loan amount or term outside the allowed sets"""

    kind = ErrorKind.INVALID_APPLICATION


class NotAllowedError(DomainException):
    """Operation forbidden by entity policy"""

    kind = ErrorKind.NOT_ALLOWED


class InsufficientBalanceError(DomainException):
    """Withdrawal exceeds the available balance"""

    kind = ErrorKind.INSUFFICIENT_BALANCE


class InvalidPlanError(DomainException):
    """Unknown funeral plan id"""

    kind = ErrorKind.INVALID_PLAN


class MissingFamilyDetailsError(DomainException):
    """Family-tier plan activated without dependent details"""

    kind = ErrorKind.MISSING_FAMILY_DETAILS


class StoreError(Exception):
    """Document store failed or rejected the operation"""

    pass
