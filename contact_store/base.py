"""
Contact Gateway Interface Definitions

Defines the abstract interface for contact store operations and the
normalized result shapes returned by write operations.
This keeps the demo orchestrator and HTTP routes independent of the
underlying MongoDB driver.
"""

import re
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

# Paging bounds for list_page
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass
class OperationResult:
    """
    Outcome of a single conditional update or upsert.

    Attributes:
        matched_count: Number of documents that matched the filter
        modified_count: Number of documents actually changed
        upserted_id: ID of the inserted document (only when the write created one)
    """
    matched_count: int
    modified_count: int
    upserted_id: Optional[str] = None

    @property
    def created(self) -> bool:
        """True when the write inserted a new document."""
        return self.upserted_id is not None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON shape used by the API."""
        return {
            "matched": self.matched_count,
            "modified": self.modified_count,
            "upsertedId": self.upserted_id,
        }


@dataclass
class BulkUpsertResult:
    """Aggregate counts for an unordered bulk upsert."""
    matched_count: int = 0
    modified_count: int = 0
    upserted_count: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "matched": self.matched_count,
            "modified": self.modified_count,
            "upserts": self.upserted_count,
        }


@dataclass
class ContactPage:
    """One page of contacts plus the total count for the filter."""
    page: int
    page_size: int
    total: int
    docs: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "pageSize": self.page_size,
            "total": self.total,
            "docs": self.docs,
        }


# (filter, insert_only_fields) pair accepted by bulk_upsert
BulkUpsertItem = Tuple[Dict[str, Any], Dict[str, Any]]


def clamp_page(page: Any, page_size: Any) -> Tuple[int, int]:
    """
    Normalize paging input.

    Values are read by their leading integer ("2.5" and "2abc" give 2);
    anything without one falls back to the defaults. page is clamped to
    >= 1 and page_size to [1, MAX_PAGE_SIZE].

    Args:
        page: Requested 1-indexed page number
        page_size: Requested number of documents per page

    Returns:
        Tuple of (page, page_size)
    """
    def _to_int(value: Any, default: int) -> int:
        if value is None:
            return default
        match = _LEADING_INT.match(str(value))
        return int(match.group(1)) if match else default

    page = max(1, _to_int(page, DEFAULT_PAGE))
    page_size = min(MAX_PAGE_SIZE, max(1, _to_int(page_size, DEFAULT_PAGE_SIZE)))
    return page, page_size


class ContactGatewayInterface(ABC):
    """
    Abstract interface for the contacts collection.

    Implementations:
    - MongoContactGateway: pymongo-backed gateway with pooled connections

    All methods follow fail-fast semantics: store errors are translated
    into ContactStoreError subclasses and propagate to the caller.
    """

    @abstractmethod
    def session(self) -> AbstractContextManager:
        """
        Acquire a scoped unit of work.

        The returned context manager yields a handle that can be passed as
        ``session=`` to the other operations. It is released on every exit
        path, including errors.
        """
        pass

    @abstractmethod
    def ensure_unique_index(self) -> None:
        """
        Establish the unique constraint on ``email`` if absent.

        Raises:
            ConstraintSetupError: If a conflicting non-unique index exists
        """
        pass

    @abstractmethod
    def conditional_update(
        self,
        filter: Dict[str, Any],
        fields_to_set: Dict[str, Any],
        session: Optional[Any] = None,
    ) -> OperationResult:
        """
        Set fields on the document matching ``filter``. Never inserts.

        Args:
            filter: MongoDB query filter (e.g., {"email": "a@x.com"})
            fields_to_set: Fields to set on the matching document

        Returns:
            OperationResult with upserted_id always None
        """
        pass

    @abstractmethod
    def upsert(
        self,
        filter: Dict[str, Any],
        fields_to_set: Optional[Dict[str, Any]] = None,
        insert_only_fields: Optional[Dict[str, Any]] = None,
        session: Optional[Any] = None,
    ) -> OperationResult:
        """
        Update the matching document or create one.

        Args:
            filter: MongoDB query filter identifying the contact
            fields_to_set: Fields applied on both update and insert
            insert_only_fields: Fields applied only when a document is created

        Returns:
            OperationResult with upserted_id set iff a document was created

        Raises:
            ContactValidationError: If the two field sets overlap
        """
        pass

    @abstractmethod
    def bulk_upsert(
        self,
        items: List[BulkUpsertItem],
        session: Optional[Any] = None,
    ) -> BulkUpsertResult:
        """
        Unordered insert-only upsert of many contacts.

        Returns:
            BulkUpsertResult with aggregate counts

        Raises:
            BulkUpsertError: If any item failed (partial counts attached)
        """
        pass

    @abstractmethod
    def delete_all(self, session: Optional[Any] = None) -> Dict[str, bool]:
        """Remove every contact. Returns {"deleted": True}."""
        pass

    @abstractmethod
    def list_page(
        self,
        filter: Optional[Dict[str, Any]] = None,
        page: Any = DEFAULT_PAGE,
        page_size: Any = DEFAULT_PAGE_SIZE,
        sort: Optional[List[tuple]] = None,
        session: Optional[Any] = None,
    ) -> ContactPage:
        """Return one page of contacts sorted by email ascending."""
        pass

    @abstractmethod
    def snapshot(
        self,
        filter: Optional[Dict[str, Any]] = None,
        sort: Optional[List[tuple]] = None,
        session: Optional[Any] = None,
    ) -> List[Dict[str, Any]]:
        """Return every matching contact sorted by email ascending."""
        pass

    @abstractmethod
    def count(
        self,
        filter: Optional[Dict[str, Any]] = None,
        session: Optional[Any] = None,
    ) -> int:
        """Count contacts matching the filter."""
        pass
