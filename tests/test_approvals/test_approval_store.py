"""Tests for the local approval store."""

import json

import pytest

from consult_invoice.approvals.store import ApprovalStore, approval_key
from consult_invoice.periods import Period

MARCH = Period(2025, 3)
APRIL = Period(2025, 4)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "approvals.json"


class TestRoundTrip:
    def test_set_then_get(self, store_path):
        store = ApprovalStore(store_path)

        store.set(MARCH, "stripe_ch_1", "approved")

        assert store.get(MARCH, "stripe_ch_1") == "approved"

    def test_overwrite(self, store_path):
        store = ApprovalStore(store_path)
        store.set(MARCH, "stripe_ch_1", "approved")

        store.set(MARCH, "stripe_ch_1", "pending")

        assert store.get(MARCH, "stripe_ch_1") == "pending"

    def test_other_keys_unaffected(self, store_path):
        store = ApprovalStore(store_path)
        store.set(MARCH, "stripe_ch_1", "rejected")

        assert store.get(APRIL, "stripe_ch_1") is None
        assert store.get(MARCH, "stripe_ch_2") is None

    def test_survives_reload(self, store_path):
        ApprovalStore(store_path).set(MARCH, "ghl_evt_1", "approved")

        assert ApprovalStore(store_path).get(MARCH, "ghl_evt_1") == "approved"

    def test_document_layout(self, store_path):
        ApprovalStore(store_path).set(MARCH, "stripe_ch_1", "approved")

        assert json.loads(store_path.read_text()) == {"2025-3_stripe_ch_1": "approved"}
        assert approval_key(MARCH, "stripe_ch_1") == "2025-3_stripe_ch_1"

    def test_in_memory_store_writes_nothing(self, tmp_path):
        store = ApprovalStore(None)
        store.set(MARCH, "stripe_ch_1", "approved")

        assert store.get(MARCH, "stripe_ch_1") == "approved"
        assert list(tmp_path.iterdir()) == []


class TestCorruptDocuments:
    @pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]", '"approved"', ""])
    def test_corrupt_document_reads_as_empty(self, store_path, content):
        store_path.write_text(content)

        store = ApprovalStore(store_path)

        assert len(store) == 0
        assert store.get(MARCH, "stripe_ch_1") is None

    def test_invalid_statuses_dropped(self, store_path):
        store_path.write_text(json.dumps({"2025-3_a": "approved", "2025-3_b": "maybe", "2025-3_c": 7}))

        store = ApprovalStore(store_path)

        assert store.entries() == {"2025-3_a": "approved"}

    def test_corrupt_document_is_replaced_on_write(self, store_path):
        store_path.write_text("{not json")
        store = ApprovalStore(store_path)

        store.set(MARCH, "a", "rejected")

        assert json.loads(store_path.read_text()) == {"2025-3_a": "rejected"}


class TestBulkAndOverlay:
    def test_bulk_set(self, store_path):
        store = ApprovalStore(store_path)

        store.bulk_set(MARCH, ["a", "b"], "rejected")

        assert store.entries(MARCH) == {"2025-3_a": "rejected", "2025-3_b": "rejected"}

    def test_entries_filters_by_period(self, store_path):
        store = ApprovalStore(store_path)
        store.set(Period(2025, 1), "a", "approved")
        store.set(Period(2025, 10), "b", "approved")

        assert store.entries(Period(2025, 1)) == {"2025-1_a": "approved"}

    def test_apply_overlays_stored_status(self, store_path, make_record):
        store = ApprovalStore(store_path)
        store.set(MARCH, "r2", "approved")
        records = [make_record("r1"), make_record("r2")]

        overlaid = store.apply(MARCH, records)

        assert [r.status for r in overlaid] == ["pending", "approved"]
        # originals untouched
        assert records[1].status == "pending"
