"""
Update vs. Upsert Demo Script

Runs a fixed, strictly sequential script against the contact gateway:

1. Seed a known contact (insert-only, result discarded)
2. updateExisting: conditional update on the seeded contact
3. updateMissingNoUpsert: conditional update on a contact that does not exist
4. upsertMissing: upsert on that same missing contact, which creates it
5. Snapshot all contacts sorted by email

Any failing step aborts the script; completed steps are not rolled back.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import ContactGatewayInterface, OperationResult
from .logger import get_logger
from .mongo_gateway import utc_now

SEED_EMAIL = "aarti@shade.org.in"
SEED_DEFAULTS = {"email": SEED_EMAIL, "name": "Aarti", "city": "Chennai"}
UPDATED_CITY = "Chennai (Adyar)"
MISSING_CITY = "Mumbai"
MISSING_TAGS = ["Prospect"]


@dataclass
class DemoReport:
    """Results of one demo run."""
    update_existing: OperationResult
    update_missing_no_upsert: OperationResult
    upsert_missing: OperationResult
    final_docs: List[Dict[str, Any]] = field(default_factory=list)
    run_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "updateExisting": self.update_existing.to_dict(),
            "updateMissingNoUpsert": self.update_missing_no_upsert.to_dict(),
            "upsertMissing": self.upsert_missing.to_dict(),
            "finalDocs": self.final_docs,
        }


def missing_email_for_run(run_id: str) -> str:
    """Email guaranteed not to exist yet: unique per run."""
    return f"missing-{run_id[:8]}@example.com"


def run_update_upsert_demo(
    gateway: ContactGatewayInterface,
    missing_email: Optional[str] = None,
    run_id: Optional[str] = None,
) -> DemoReport:
    """
    Run the update/upsert script and return its report.

    Args:
        gateway: Contact gateway to run against
        missing_email: Email used for the "missing" steps. Defaults to a
            per-run address so step B never matches on repeated runs.
        run_id: Optional run identifier for log correlation

    Returns:
        DemoReport with the three step results and the final snapshot
    """
    run_id = run_id or uuid.uuid4().hex
    missing_email = missing_email or missing_email_for_run(run_id)
    log = get_logger(__name__, run_id=run_id)

    seed_filter = {"email": SEED_EMAIL}
    missing_filter = {"email": missing_email}

    log.info(f"Starting update/upsert demo (missing contact: {missing_email})")

    with gateway.session() as session:
        gateway.upsert(seed_filter, insert_only_fields=dict(SEED_DEFAULTS), session=session)
        log.for_step("seed").debug(f"Seeded {SEED_EMAIL}")

        update_existing = gateway.conditional_update(
            seed_filter, {"city": UPDATED_CITY}, session=session
        )
        _log_step(log, "updateExisting", update_existing)

        update_missing = gateway.conditional_update(
            missing_filter, {"city": MISSING_CITY}, session=session
        )
        _log_step(log, "updateMissingNoUpsert", update_missing)

        upsert_missing = gateway.upsert(
            missing_filter,
            fields_to_set={"city": MISSING_CITY},
            insert_only_fields={"createdAt": utc_now(), "tags": list(MISSING_TAGS)},
            session=session,
        )
        _log_step(log, "upsertMissing", upsert_missing)

        final_docs = gateway.snapshot(session=session)

    log.info(f"Demo done: {len(final_docs)} contacts in snapshot")
    return DemoReport(
        update_existing=update_existing,
        update_missing_no_upsert=update_missing,
        upsert_missing=upsert_missing,
        final_docs=final_docs,
        run_id=run_id,
    )


def _log_step(log, step: str, result: OperationResult) -> None:
    log.for_step(step).info(
        f"matched={result.matched_count} modified={result.modified_count} upserted_id={result.upserted_id}"
    )
