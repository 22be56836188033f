"""
Error taxonomy for the Payment Plan Engine.

API layers map these to HTTP responses:
- ValidationError -> 400 (subclasses ValueError)
- NotFoundError -> 404
- ConflictError -> 409
- ArithmeticInvariantViolation is a bug signal and is never handled.
"""


class ValidationError(ValueError):
    """Input rejected before anything is persisted."""

    def __init__(self, message: str, details: list[dict] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, [{"field": field, "message": message}])


class NotFoundError(LookupError):
    """Plan or installment id is unknown."""


class ConflictError(Exception):
    """Cancelled installment or stale version during payment recording."""


class ArithmeticInvariantViolation(AssertionError):
    """Generated installments do not reconcile to the commissionable value."""
