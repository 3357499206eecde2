"""
MongoDB Contact Gateway

pymongo implementation of the contact gateway. Wraps the raw driver calls
and normalizes their outcomes into OperationResult / BulkUpsertResult.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from pymongo import ASCENDING, MongoClient, UpdateOne
from pymongo.client_session import ClientSession
from pymongo.collection import Collection
from pymongo.errors import (
    BulkWriteError,
    ConnectionFailure,
    DuplicateKeyError,
    OperationFailure,
    PyMongoError,
)

from .base import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    BulkUpsertItem,
    BulkUpsertResult,
    ContactGatewayInterface,
    ContactPage,
    OperationResult,
    clamp_page,
)
from .config import StoreConfig
from .errors import (
    BulkUpsertError,
    ConnectivityError,
    ConstraintSetupError,
    ConstraintViolation,
    ContactStoreError,
    ContactValidationError,
)

logger = logging.getLogger(__name__)

EMAIL_FIELD = "email"
SORT_BY_EMAIL = [(EMAIL_FIELD, ASCENDING)]
# Internal storage key is never returned to callers
PUBLIC_PROJECTION = {"_id": 0}


def utc_now() -> datetime:
    """Current UTC time for createdAt/updatedAt stamps."""
    return datetime.now(timezone.utc)


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    """Re-raise pymongo errors as ContactStoreError subclasses."""
    try:
        yield
    except DuplicateKeyError as exc:
        raise ConstraintViolation(f"{operation} violated the unique email constraint: {exc}") from exc
    except ConnectionFailure as exc:
        raise ConnectivityError(f"MongoDB unreachable during {operation}: {exc}") from exc
    except PyMongoError as exc:
        raise ContactStoreError(f"{operation} failed: {exc}") from exc


class MongoContactGateway(ContactGatewayInterface):
    """
    Gateway to the contacts collection.

    Connection Management:
    - One MongoClient per gateway, created lazily with maxPoolSize from config
    - Each operation runs inside a client session acquired from the pool
      and ended on every exit path
    - Callers may pass an open session to group operations

    Error Handling:
    - Fail-fast: driver errors are translated and propagate to the caller
    - Zero matches on a conditional update is a result, not an error
    """

    def __init__(self, config: StoreConfig):
        """
        Initialize the gateway with connection parameters.

        Args:
            config: Resolved store configuration
        """
        self._config = config
        self._client: Optional[MongoClient] = None
        self._index_ready = False
        self._lock = threading.Lock()

    @property
    def config(self) -> StoreConfig:
        return self._config

    def _get_client(self) -> MongoClient:
        """Get the MongoClient, creating it on first use."""
        with self._lock:
            if self._client is None:
                self._client = MongoClient(
                    self._config.mongo_url,
                    maxPoolSize=self._config.max_pool_size,
                )
                logger.info(
                    f"Contact gateway connected: {self._config.database}.{self._config.collection} "
                    f"(maxPoolSize={self._config.max_pool_size})"
                )
            return self._client

    def _get_collection(self) -> Collection:
        client = self._get_client()
        return client[self._config.database][self._config.collection]

    @contextmanager
    def session(self) -> Iterator[ClientSession]:
        """Acquire a pooled client session; always ended on exit."""
        with _translate_errors("session start"):
            session = self._get_client().start_session()
        try:
            yield session
        finally:
            session.end_session()

    @contextmanager
    def _unit_of_work(self, session: Optional[ClientSession]) -> Iterator[ClientSession]:
        """Reuse the caller's session or acquire a new one."""
        if session is not None:
            yield session
            return
        with self.session() as new_session:
            yield new_session

    def ensure_unique_index(self, session: Optional[ClientSession] = None) -> None:
        """
        Create the unique index on email if it does not exist.

        Raises:
            ConstraintSetupError: If a non-unique email index exists or the
                server rejects the unique index
        """
        with self._unit_of_work(session) as s, _translate_errors("ensure_unique_index"):
            collection = self._get_collection()

            for name, info in collection.index_information(session=s).items():
                if list(info.get("key", [])) == [(EMAIL_FIELD, ASCENDING)] and not info.get("unique", False):
                    raise ConstraintSetupError(
                        f"Index '{name}' on {EMAIL_FIELD} exists but is not unique; drop it before starting"
                    )

            try:
                collection.create_index(SORT_BY_EMAIL, unique=True, session=s)
            except OperationFailure as exc:
                raise ConstraintSetupError(f"Could not create unique {EMAIL_FIELD} index: {exc}") from exc

        self._index_ready = True
        logger.debug(f"Unique {EMAIL_FIELD} index ensured on {self._config.collection}")

    def _ensure_index_once(self, session: ClientSession) -> None:
        if not self._index_ready:
            self.ensure_unique_index(session=session)

    def conditional_update(
        self,
        filter: Dict[str, Any],
        fields_to_set: Dict[str, Any],
        session: Optional[ClientSession] = None,
    ) -> OperationResult:
        """
        Update the matching contact without ever inserting.

        Zero matches returns matched=0, modified=0.
        """
        if not fields_to_set:
            raise ContactValidationError("fields_to_set must not be empty")

        with self._unit_of_work(session) as s:
            self._ensure_index_once(s)
            with _translate_errors("conditional_update"):
                result = self._get_collection().update_one(
                    filter,
                    {"$set": dict(fields_to_set)},
                    session=s,
                )

        logger.debug(f"conditional_update {filter}: matched={result.matched_count} modified={result.modified_count}")
        return OperationResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    def upsert(
        self,
        filter: Dict[str, Any],
        fields_to_set: Optional[Dict[str, Any]] = None,
        insert_only_fields: Optional[Dict[str, Any]] = None,
        session: Optional[ClientSession] = None,
    ) -> OperationResult:
        """
        Update the matching contact or create it.

        Insert-only fields (and a createdAt stamp) are written only when the
        document is created; an existing match keeps its original values.
        """
        fields_to_set = dict(fields_to_set or {})
        insert_only = dict(insert_only_fields or {})

        overlap = set(fields_to_set) & set(insert_only)
        if overlap:
            raise ContactValidationError(
                f"Fields cannot be both always-set and insert-only: {', '.join(sorted(overlap))}"
            )
        if "createdAt" not in fields_to_set:
            insert_only.setdefault("createdAt", utc_now())

        update: Dict[str, Any] = {"$setOnInsert": insert_only}
        if fields_to_set:
            update["$set"] = fields_to_set

        with self._unit_of_work(session) as s:
            self._ensure_index_once(s)
            with _translate_errors("upsert"):
                result = self._get_collection().update_one(filter, update, upsert=True, session=s)

        upserted_id = str(result.upserted_id) if result.upserted_id is not None else None
        logger.debug(
            f"upsert {filter}: matched={result.matched_count} modified={result.modified_count} "
            f"upserted_id={upserted_id}"
        )
        return OperationResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            upserted_id=upserted_id,
        )

    def bulk_upsert(
        self,
        items: List[BulkUpsertItem],
        session: Optional[ClientSession] = None,
    ) -> BulkUpsertResult:
        """
        Insert-only upsert of many contacts in one unordered bulk write.

        A failing item does not stop the others. If any item failed, the
        partial totals are attached to the raised BulkUpsertError.
        """
        if not items:
            return BulkUpsertResult()

        now = utc_now()
        operations = []
        for filter, insert_only_fields in items:
            insert_only = dict(insert_only_fields or {})
            insert_only.setdefault("createdAt", now)
            operations.append(UpdateOne(filter, {"$setOnInsert": insert_only}, upsert=True))

        with self._unit_of_work(session) as s:
            self._ensure_index_once(s)
            with _translate_errors("bulk_upsert"):
                try:
                    result = self._get_collection().bulk_write(operations, ordered=False, session=s)
                except BulkWriteError as exc:
                    details = exc.details or {}
                    partial = BulkUpsertResult(
                        matched_count=details.get("nMatched", 0),
                        modified_count=details.get("nModified", 0),
                        upserted_count=details.get("nUpserted", 0),
                    )
                    failures = [
                        f"item {error.get('index')}: {error.get('errmsg')}"
                        for error in details.get("writeErrors", [])
                    ]
                    logger.error(f"bulk_upsert partial failure: {failures}")
                    raise BulkUpsertError(
                        f"{len(failures)} of {len(operations)} bulk upserts failed",
                        partial=partial,
                        failures=failures,
                    ) from exc

        logger.info(
            f"bulk_upsert: {result.upserted_count} upserted, {result.matched_count} matched, "
            f"{result.modified_count} modified"
        )
        return BulkUpsertResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            upserted_count=result.upserted_count,
        )

    def delete_all(self, session: Optional[ClientSession] = None) -> Dict[str, bool]:
        """Remove every contact. Irreversible."""
        with self._unit_of_work(session) as s, _translate_errors("delete_all"):
            result = self._get_collection().delete_many({}, session=s)

        logger.info(f"delete_all removed {result.deleted_count} contacts")
        return {"deleted": True}

    def list_page(
        self,
        filter: Optional[Dict[str, Any]] = None,
        page: Any = DEFAULT_PAGE,
        page_size: Any = DEFAULT_PAGE_SIZE,
        sort: Optional[List[tuple]] = None,
        session: Optional[ClientSession] = None,
    ) -> ContactPage:
        """Return one page of contacts, sorted by email ascending unless sort is given."""
        filter = filter or {}
        page, page_size = clamp_page(page, page_size)

        with self._unit_of_work(session) as s, _translate_errors("list_page"):
            collection = self._get_collection()
            total = collection.count_documents(filter, session=s)
            cursor = (
                collection.find(filter, PUBLIC_PROJECTION, session=s)
                .sort(sort or SORT_BY_EMAIL)
                .skip((page - 1) * page_size)
                .limit(page_size)
            )
            docs = list(cursor)

        return ContactPage(page=page, page_size=page_size, total=total, docs=docs)

    def snapshot(
        self,
        filter: Optional[Dict[str, Any]] = None,
        sort: Optional[List[tuple]] = None,
        session: Optional[ClientSession] = None,
    ) -> List[Dict[str, Any]]:
        """Return every matching contact, sorted by email ascending unless sort is given."""
        with self._unit_of_work(session) as s, _translate_errors("snapshot"):
            collection = self._get_collection()
            cursor = collection.find(filter or {}, PUBLIC_PROJECTION, session=s).sort(sort or SORT_BY_EMAIL)
            return list(cursor)

    def count(
        self,
        filter: Optional[Dict[str, Any]] = None,
        session: Optional[ClientSession] = None,
    ) -> int:
        """Count contacts matching the filter."""
        with self._unit_of_work(session) as s, _translate_errors("count"):
            return self._get_collection().count_documents(filter or {}, session=s)

    def close(self) -> None:
        """
        Close the connection pool.

        The next operation reconnects and re-checks the index.
        """
        with self._lock:
            if self._client is not None:
                self._client.close()
            self._client = None
            self._index_ready = False
        logger.info("Contact gateway connection closed")
