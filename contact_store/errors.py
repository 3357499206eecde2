"""
Contact store exceptions.

The gateway translates pymongo driver errors into these types so callers
only need to know about one hierarchy.
"""

from typing import List, Optional

from .base import BulkUpsertResult


class ContactStoreError(Exception):
    """Base exception for contact store errors."""
    pass


class ContactValidationError(ContactStoreError):
    """Raised when caller input is invalid (e.g., missing email)."""
    pass


class ConstraintViolation(ContactStoreError):
    """Raised when a write violates the unique email constraint."""
    pass


class ConnectivityError(ContactStoreError):
    """Raised when the database cannot be reached."""
    pass


class ConstraintSetupError(ContactStoreError):
    """Raised when the unique email index cannot be established."""
    pass


class BulkUpsertError(ContactStoreError):
    """
    Raised when one or more items of an unordered bulk upsert failed.

    The remaining items were still applied; their totals are in ``partial``.
    """

    def __init__(
        self,
        message: str,
        partial: Optional[BulkUpsertResult] = None,
        failures: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.partial = partial or BulkUpsertResult()
        self.failures = failures or []
