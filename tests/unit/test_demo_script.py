"""
Tests for the update vs. upsert demo script and sample data.
"""

import pytest
from unittest.mock import MagicMock

from contact_store import (
    ConnectivityError,
    OperationResult,
    SAMPLE_CONTACTS,
    insert_sample_contacts,
    run_update_upsert_demo,
)
from contact_store.demo import SEED_EMAIL, missing_email_for_run


class TestRunUpdateUpsertDemo:
    """Runs the script against the in-memory collection."""

    def test_first_run_report(self, gateway):
        report = run_update_upsert_demo(gateway, missing_email="missing@example.com")
        results = report.to_dict()

        assert results["updateExisting"] == {"matched": 1, "modified": 1, "upsertedId": None}
        assert results["updateMissingNoUpsert"] == {"matched": 0, "modified": 0, "upsertedId": None}
        assert results["upsertMissing"]["matched"] == 0
        assert results["upsertMissing"]["modified"] == 0
        assert results["upsertMissing"]["upsertedId"] is not None

        emails = [doc["email"] for doc in results["finalDocs"]]
        assert emails == [SEED_EMAIL, "missing@example.com"]

        seed, missing = results["finalDocs"]
        assert seed["city"] == "Chennai (Adyar)"
        assert seed["name"] == "Aarti"
        assert missing["city"] == "Mumbai"
        assert missing["tags"] == ["Prospect"]
        assert "createdAt" in missing
        assert all("_id" not in doc for doc in results["finalDocs"])

    def test_second_run_update_existing_is_unchanged(self, gateway):
        run_update_upsert_demo(gateway)

        report = run_update_upsert_demo(gateway)

        assert report.update_existing.to_dict() == {"matched": 1, "modified": 0, "upsertedId": None}
        assert report.update_missing_no_upsert.matched_count == 0
        assert report.upsert_missing.upserted_id is not None

    def test_default_missing_email_is_unique_per_run(self, gateway):
        first = run_update_upsert_demo(gateway, run_id="aaaaaaaa1111")
        second = run_update_upsert_demo(gateway, run_id="bbbbbbbb2222")

        emails = [doc["email"] for doc in second.final_docs]
        assert missing_email_for_run("aaaaaaaa1111") in emails
        assert missing_email_for_run("bbbbbbbb2222") in emails
        assert first.run_id == "aaaaaaaa1111"

    def test_seed_keeps_existing_contact(self, gateway):
        gateway.upsert({"email": SEED_EMAIL}, insert_only_fields={"name": "Aarti S", "city": "Chennai (Adyar)"})

        report = run_update_upsert_demo(gateway)

        assert report.update_existing.modified_count == 0
        seed = next(doc for doc in report.final_docs if doc["email"] == SEED_EMAIL)
        assert seed["name"] == "Aarti S"

    def test_step_failure_aborts_script(self):
        gateway = MagicMock()
        gateway.upsert.return_value = OperationResult(matched_count=0, modified_count=0, upserted_id="x")
        gateway.conditional_update.side_effect = [
            OperationResult(matched_count=1, modified_count=1),
            ConnectivityError("MongoDB unreachable"),
        ]

        with pytest.raises(ConnectivityError):
            run_update_upsert_demo(gateway)

        # Seed only; step C never ran
        assert gateway.upsert.call_count == 1
        gateway.snapshot.assert_not_called()
        gateway.session.return_value.__exit__.assert_called_once()


class TestInsertSampleContacts:
    """Tests for the insert-sample dataset."""

    def test_inserts_three_samples(self, gateway):
        result = insert_sample_contacts(gateway)

        assert result == {"bulk": {"matched": 0, "modified": 0, "upserts": 3}, "total": 3}

    def test_second_insert_matches_existing(self, gateway):
        insert_sample_contacts(gateway)

        result = insert_sample_contacts(gateway)

        assert result == {"bulk": {"matched": 3, "modified": 0, "upserts": 0}, "total": 3}

    def test_samples_are_stamped_with_created_at(self, gateway):
        insert_sample_contacts(gateway)

        docs = gateway.snapshot()
        assert len({doc["createdAt"] for doc in docs}) == 1
        assert {doc["email"] for doc in docs} == {c["email"] for c in SAMPLE_CONTACTS}
