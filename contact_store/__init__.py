"""
Contact Store Gateway and Update/Upsert Demo

Thin layer over MongoDB that contrasts a conditional update (modify only
if a match exists) with an upsert (modify or insert).

Public API:
- get_contact_gateway(): Factory returning the shared gateway instance
- MongoContactGateway: pymongo-backed gateway
- ContactGatewayInterface: Abstract interface for the contacts collection
- OperationResult / BulkUpsertResult / ContactPage: Normalized results
- run_update_upsert_demo(): The fixed three-step demo script
- insert_sample_contacts(): Bulk-upsert the three sample contacts

Usage:
    from contact_store import get_contact_gateway, StoreConfig

    gateway = get_contact_gateway(StoreConfig.from_env())
    result = gateway.upsert(
        {"email": "a@x.com"},
        fields_to_set={"city": "Mumbai"},
        insert_only_fields={"tags": ["Prospect"]},
    )
    result.upserted_id  # set only when the contact was created
"""

from .base import (
    BulkUpsertResult,
    ContactGatewayInterface,
    ContactPage,
    OperationResult,
    clamp_page,
)
from .config import StoreConfig, get_contact_gateway, reset_contact_gateway
from .demo import DemoReport, run_update_upsert_demo
from .errors import (
    BulkUpsertError,
    ConnectivityError,
    ConstraintSetupError,
    ConstraintViolation,
    ContactStoreError,
    ContactValidationError,
)
from .mongo_gateway import MongoContactGateway
from .samples import SAMPLE_CONTACTS, insert_sample_contacts

__all__ = [
    # Gateway
    "get_contact_gateway",
    "reset_contact_gateway",
    "ContactGatewayInterface",
    "MongoContactGateway",
    "StoreConfig",
    # Results
    "OperationResult",
    "BulkUpsertResult",
    "ContactPage",
    "clamp_page",
    # Demo
    "DemoReport",
    "run_update_upsert_demo",
    "SAMPLE_CONTACTS",
    "insert_sample_contacts",
    # Errors
    "ContactStoreError",
    "ContactValidationError",
    "ConstraintViolation",
    "ConnectivityError",
    "ConstraintSetupError",
    "BulkUpsertError",
]
