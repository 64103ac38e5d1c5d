"""
Ledger error taxonomy.

Every failure a caller can act on has its own class. All of them
are raised before anything is written, so none of them leave
partial state behind. The HTTP layer turns status_code into the
response status.
"""


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    status_code = 400
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Malformed input: missing field, duplicate code, unknown reference."""

    status_code = 422


class DoubleEntryError(LedgerError):
    """A draft violates the double-entry invariant."""

    status_code = 422


class UnbalancedEntriesError(DoubleEntryError):
    """Total debits, total credits and total amount disagree."""


class InsufficientEntriesError(DoubleEntryError):
    """A transaction needs at least two entries."""


class InvalidEntryError(DoubleEntryError):
    """An entry must have exactly one strictly positive side."""


class StructuralError(LedgerError):
    """The account hierarchy would become cyclic or invalid."""

    status_code = 422


class NotFoundError(LedgerError):
    """A referenced record does not exist."""

    status_code = 404


class ConflictError(LedgerError):
    """Deletion blocked by dependent records."""

    status_code = 409


class LockedTransactionError(LedgerError):
    """Mutation attempted on a locked transaction."""

    status_code = 409


class AlreadyApprovedError(LedgerError):
    """Approval is one-way and has already happened."""

    status_code = 409


class NoOpError(LedgerError):
    """The requested state is already the current state."""

    status_code = 409


class ContentionError(LedgerError):
    """A concurrent writer won the race and retrying here could not finish."""

    status_code = 503
    retryable = True
