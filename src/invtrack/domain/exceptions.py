"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or input constraint was violated."""


class EntityNotFoundError(DomainException):
    """A referenced product, order, transfer, lot or item does not exist."""


class InvalidTransitionError(DomainException):
    """A status change outside the legal lifecycle graph was requested."""


class InsufficientStockError(ValidationError):
    """Not enough available stock in the source warehouse.

    User-correctable: reduce the quantity or pick another warehouse.
    """


class InvariantViolationError(DomainException):
    """A stock mutation would break a ledger invariant (e.g. negative stock).

    Callers are expected to prevent this with availability checks first,
    so reaching it indicates a bug or a lost update.
    """


class ConcurrencyConflictError(DomainException):
    """The stored document changed since it was loaded (stale version)."""


class CountDriftError(ValidationError):
    """Stock changed between the start of a count and its reconciliation."""

    def __init__(self, message: str, current_stock: int) -> None:
        super().__init__(message)
        self.current_stock = current_stock
