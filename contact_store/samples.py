"""
Fixed sample contacts for the insert-sample endpoint.

Samples are written insert-only, so re-inserting never overwrites a
contact that already exists.
"""

import logging
from typing import Any, Dict, List

from .base import BulkUpsertItem, ContactGatewayInterface

logger = logging.getLogger(__name__)

SAMPLE_CONTACTS: List[Dict[str, Any]] = [
    {"email": "aarti@shade.org.in", "name": "Aarti", "city": "Chennai", "tags": ["Volunteer"]},
    {"email": "rahul@example.com", "name": "Rahul", "city": "Bengaluru", "tags": ["Donor"]},
    {"email": "latha@example.com", "name": "Latha", "city": "Mumbai", "tags": ["Prospect"]},
]


def sample_upsert_items() -> List[BulkUpsertItem]:
    """Build (filter, insert_only_fields) pairs for the sample contacts."""
    return [
        ({"email": contact["email"]}, {**contact, "tags": list(contact["tags"])})
        for contact in SAMPLE_CONTACTS
    ]


def insert_sample_contacts(gateway: ContactGatewayInterface) -> Dict[str, Any]:
    """
    Bulk-upsert the sample contacts and report the resulting total.

    Returns:
        {"bulk": {"matched", "modified", "upserts"}, "total": <count>}
    """
    with gateway.session() as session:
        bulk = gateway.bulk_upsert(sample_upsert_items(), session=session)
        total = gateway.count(session=session)

    logger.info(f"Sample contacts inserted: {bulk.upserted_count} new, {total} total")
    return {"bulk": bulk.to_dict(), "total": total}
