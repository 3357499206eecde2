"""
Global fixtures for all tests.

Provides an in-memory stand-in for a pymongo Collection so gateway
behavior (matching, $set/$setOnInsert, unique email, paging) can be
tested without a MongoDB server, plus environment isolation.
"""

import copy
import os
import threading
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from bson import ObjectId
from pymongo.errors import BulkWriteError, DuplicateKeyError, OperationFailure

# Set test environment BEFORE any imports of demo_service so settings load cleanly
os.environ["ENVIRONMENT"] = "development"
os.environ["ENSURE_INDEX_ON_STARTUP"] = "false"
os.environ["MONGO_URL"] = "mongodb://localhost:27017"


def _field_matches(doc_value, expected) -> bool:
    if isinstance(doc_value, list) and not isinstance(expected, list):
        return expected in doc_value
    return doc_value == expected


def _matches(doc: dict, filter: dict) -> bool:
    return all(key in doc and _field_matches(doc[key], value) for key, value in filter.items())


class FakeCursor:
    """Subset of pymongo Cursor: sort, skip, limit, iteration."""

    def __init__(self, docs):
        self._docs = docs
        self._skip = 0
        self._limit = 0

    def sort(self, keys):
        for field, direction in reversed(keys):
            self._docs.sort(key=lambda d: d.get(field, ""), reverse=direction < 0)
        return self

    def skip(self, n):
        self._skip = n
        return self

    def limit(self, n):
        self._limit = n
        return self

    def __iter__(self):
        docs = self._docs[self._skip:]
        if self._limit:
            docs = docs[:self._limit]
        return iter(docs)


class FakeCollection:
    """
    In-memory collection implementing the calls MongoContactGateway makes.

    Supports equality filters (scalar-in-array for list fields), $set and
    $setOnInsert updates, upserts, unique indexes and bulk UpdateOne ops.
    """

    def __init__(self):
        self.docs = []
        self.indexes = {"_id_": {"key": [("_id", 1)]}}
        self._lock = threading.Lock()

    # -- indexes -----------------------------------------------------------

    def index_information(self, session=None):
        with self._lock:
            return copy.deepcopy(self.indexes)

    def create_index(self, keys, unique=False, session=None, **kwargs):
        with self._lock:
            return self._create_index(keys, unique)

    def _create_index(self, keys, unique):
        name = "_".join(f"{field}_{direction}" for field, direction in keys)
        existing = self.indexes.get(name)
        if existing is not None:
            if existing.get("unique", False) != unique:
                raise OperationFailure("Index already exists with different options", code=85)
            return name
        if unique:
            fields = [field for field, _ in keys]
            seen = set()
            for doc in self.docs:
                value = tuple(doc.get(field) for field in fields)
                if value in seen:
                    raise DuplicateKeyError(f"E11000 duplicate key error: {value}", code=11000)
                seen.add(value)
        self.indexes[name] = {"key": list(keys), "unique": unique}
        return name

    def _unique_fields(self):
        return [
            [field for field, _ in info["key"]]
            for info in self.indexes.values()
            if info.get("unique")
        ]

    def _check_unique(self, candidate, ignore=None):
        for fields in self._unique_fields():
            value = tuple(candidate.get(field) for field in fields)
            for doc in self.docs:
                if doc is ignore:
                    continue
                if tuple(doc.get(field) for field in fields) == value:
                    raise DuplicateKeyError(f"E11000 duplicate key error: {value}", code=11000)

    # -- writes ------------------------------------------------------------

    def _apply_update_one(self, filter, update, upsert):
        for doc in self.docs:
            if _matches(doc, filter):
                changed = False
                updated = dict(doc)
                for key, value in update.get("$set", {}).items():
                    if updated.get(key, object()) != value:
                        updated[key] = copy.deepcopy(value)
                        changed = True
                if changed:
                    self._check_unique(updated, ignore=doc)
                    doc.clear()
                    doc.update(updated)
                return 1, int(changed), None

        if not upsert:
            return 0, 0, None

        new_doc = {"_id": ObjectId()}
        new_doc.update({k: v for k, v in filter.items() if not k.startswith("$")})
        new_doc.update(copy.deepcopy(update.get("$set", {})))
        new_doc.update(copy.deepcopy(update.get("$setOnInsert", {})))
        self._check_unique(new_doc)
        self.docs.append(new_doc)
        return 0, 0, new_doc["_id"]

    def update_one(self, filter, update, upsert=False, session=None):
        with self._lock:
            matched, modified, upserted_id = self._apply_update_one(filter, update, upsert)
        return SimpleNamespace(matched_count=matched, modified_count=modified, upserted_id=upserted_id)

    def bulk_write(self, requests, ordered=True, session=None):
        """
        Apply UpdateOne requests. Ordered writes stop at the first error;
        unordered writes attempt every request. Errors raise BulkWriteError
        with server-style details.
        """
        matched = modified = upserted = 0
        write_errors = []
        with self._lock:
            for index, op in enumerate(requests):
                try:
                    m, mod, up_id = self._apply_update_one(op._filter, op._doc, op._upsert)
                except DuplicateKeyError as exc:
                    write_errors.append({"index": index, "code": 11000, "errmsg": str(exc)})
                    if ordered:
                        break
                    continue
                matched += m
                modified += mod
                upserted += int(up_id is not None)
        if write_errors:
            raise BulkWriteError({
                "writeErrors": write_errors,
                "writeConcernErrors": [],
                "nInserted": 0,
                "nUpserted": upserted,
                "nMatched": matched,
                "nModified": modified,
                "nRemoved": 0,
                "upserted": [],
            })
        return SimpleNamespace(matched_count=matched, modified_count=modified, upserted_count=upserted)

    def delete_many(self, filter, session=None):
        with self._lock:
            keep = [doc for doc in self.docs if not _matches(doc, filter)]
            deleted = len(self.docs) - len(keep)
            self.docs = keep
        return SimpleNamespace(deleted_count=deleted)

    # -- reads -------------------------------------------------------------

    def count_documents(self, filter, session=None):
        return sum(1 for doc in self.docs if _matches(doc, filter))

    def find(self, filter=None, projection=None, session=None):
        docs = [copy.deepcopy(doc) for doc in self.docs if _matches(doc, filter or {})]
        if projection and projection.get("_id") == 0:
            for doc in docs:
                doc.pop("_id", None)
        return FakeCursor(docs)

    def find_one(self, filter, session=None):
        for doc in self.docs:
            if _matches(doc, filter):
                return copy.deepcopy(doc)
        return None


@pytest.fixture
def fake_collection():
    """Empty in-memory contacts collection."""
    return FakeCollection()


@pytest.fixture
def mongo_client_mock(fake_collection):
    """
    Patch MongoClient in the gateway module.

    client[db][collection] returns the fake collection; start_session()
    returns a MagicMock session.
    """
    with patch("contact_store.mongo_gateway.MongoClient") as mock_client:
        mock_db = MagicMock()
        mock_db.__getitem__.return_value = fake_collection
        mock_client.return_value.__getitem__.return_value = mock_db
        yield mock_client


@pytest.fixture
def gateway(mongo_client_mock):
    """MongoContactGateway backed by the fake collection."""
    from contact_store import MongoContactGateway, StoreConfig

    gw = MongoContactGateway(StoreConfig(mongo_url="mongodb://test", database="demo_db", collection="contacts"))
    yield gw
    gw.close()
