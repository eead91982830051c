from __future__ import annotations


class LedgerError(Exception):
    """Base class for typed errors surfaced by the ledger services."""

    code = "INTERNAL_SERVER_ERROR"
    status_code = 500
    retryable = False

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__class__.__doc__ or self.code)

    @property
    def message(self) -> str:
        return str(self)


class InvalidInputError(LedgerError):
    """The request violates the shape or value rules of the ledger."""

    code = "INVALID_INPUT"
    status_code = 400


class InvalidShapeError(InvalidInputError):
    """The from/to fields do not form an allowed shape for the transaction type."""


class NotFoundError(LedgerError):
    """The referenced entity does not exist or was deleted."""

    code = "NOT_FOUND"
    status_code = 404


class ForbiddenError(LedgerError):
    """The caller may not mutate or reference this entity."""

    code = "FORBIDDEN"
    status_code = 403


class ConflictError(LedgerError):
    """The write collides with an existing record or a concurrent writer."""

    code = "CONFLICT"
    status_code = 409


class TransientError(LedgerError):
    """The store could not complete the write; the session was aborted."""

    code = "TRANSIENT"
    status_code = 503
    retryable = True


class InternalError(LedgerError):
    """A ledger invariant was violated at runtime."""

    code = "INTERNAL_SERVER_ERROR"
    status_code = 500


__all__ = [
    "LedgerError",
    "InvalidInputError",
    "InvalidShapeError",
    "NotFoundError",
    "ForbiddenError",
    "ConflictError",
    "TransientError",
    "InternalError",
]
