"""
Registration error taxonomy.

Business-rule violations surface to callers with their status code.
InternalInconsistencyError is only ever logged by the capacity ledger.
"""

from src.platform.exception.exceptions import ConflictError, CustomBaseError, DomainError


class DuplicateRegistrationError(ConflictError):
    def __init__(self, message: str = 'You are already registered for this ticket type') -> None:
        super().__init__(message)


class CapacityExceededError(ConflictError):
    def __init__(self, message: str = 'This ticket type is sold out') -> None:
        super().__init__(message)


class EventNotOpenError(DomainError):
    def __init__(self, message: str = 'Event is not open for registration') -> None:
        super().__init__(message, 422)


class InternalInconsistencyError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 500)
