"""Error kinds surfaced by the account and script services."""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for every error the service layer reports to its callers."""


class ValidationFailedError(ServiceError):
    """Input was malformed or out of range."""


class ConflictError(ServiceError):
    """A uniqueness constraint (account email) would be violated."""


class UnauthorizedError(ServiceError):
    """Credentials or session token were rejected."""


class NotFoundError(ServiceError):
    """The record does not exist or is not owned by the caller."""


class InternalError(ServiceError):
    """Failure below the service layer that the caller cannot act on."""


class StorageError(InternalError):
    """The record store's backing medium failed."""


class GenerationError(InternalError):
    """The text generation collaborator failed."""
