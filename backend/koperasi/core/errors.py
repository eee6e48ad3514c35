"""Domain error taxonomy for the koperasi engine.

Every error carries a machine-checkable ``kind`` and a snake_case ``code``
that the API layer returns as ``detail``, plus a human-readable message.
"""


class KoperasiError(Exception):
    """Base exception for all domain errors."""

    kind = "error"

    def __init__(self, code: str, message: str | None = None):
        super().__init__(message or code)
        self.code = code
        self.message = message or code


class NotFoundError(KoperasiError):
    """Raised when a loan, installment, calculation or user id does not resolve."""

    kind = "not_found"


class InvalidStateError(KoperasiError):
    """Raised when an operation is attempted outside its legal state."""

    kind = "invalid_state"


class ConflictError(KoperasiError):
    """Raised on duplicates and on repeating a one-shot operation."""

    kind = "conflict"


class InvalidInputError(KoperasiError):
    """Raised for non-positive amounts, terms or negative rates."""

    kind = "validation_error"
