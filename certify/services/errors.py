"""Service-level errors for application reconciliation.

The API layer maps these to HTTP status codes. Input-shape and numeric
problems are never raised; they are filtered or logged.
"""

from __future__ import annotations


class ReconcileError(Exception):
    """Base class for failed reconcile calls. Prior persisted state is untouched."""

    retriable: bool = False


class ApplicationNotFoundError(ReconcileError, LookupError):
    """Application does not exist or is not owned by the caller."""


class ReconcileConflictError(ReconcileError, ValueError):
    """Unique or foreign-key constraint violation while persisting."""


class ReconcileTimeoutError(ReconcileError):
    """Reconcile transaction exceeded its budget and was rolled back."""

    retriable = True
