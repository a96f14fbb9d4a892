"""Pure logic tests for the Stripe / Go High Level merge."""

from consult_invoice.billing.merge import merge


class TestMergeDedup:
    def test_disjoint_emails_keep_everything(self, make_record):
        paid = [
            make_record("stripe_a", email="a@x.com", day=3),
            make_record("stripe_b", email="b@x.com", day=7),
        ]
        events = [
            make_record("ghl_c", source="gohighlevel", email="c@y.com", day=5),
            make_record("ghl_d", source="gohighlevel", email="d@y.com", day=9),
        ]

        result = merge(paid, events)

        assert len(result) == len(paid) + len(events)
        assert {r.id for r in result} == {"stripe_a", "stripe_b", "ghl_c", "ghl_d"}

    def test_drops_event_with_matching_email_case_insensitive(self, make_record):
        paid = [make_record("stripe_1", email="a@x")]
        events = [
            make_record("ghl_1", source="gohighlevel", email="A@X"),
            make_record("ghl_2", source="gohighlevel", email="b@y"),
        ]

        ids = [r.id for r in merge(paid, events)]

        assert "ghl_1" not in ids
        assert "ghl_2" in ids
        assert "stripe_1" in ids

    def test_key_is_lowercased_email_only(self, make_record):
        paid = [make_record("stripe_1", email="a@x")]
        events = [make_record("ghl_1", source="gohighlevel", email=" a@x ")]

        ids = [r.id for r in merge(paid, events)]

        assert ids.count("ghl_1") == 1

    def test_events_without_email_always_included(self, make_record):
        paid = [make_record("stripe_1", email="")]
        events = [
            make_record("ghl_1", source="gohighlevel", email=""),
            make_record("ghl_2", source="gohighlevel", email=""),
        ]

        ids = {r.id for r in merge(paid, events)}

        assert ids == {"stripe_1", "ghl_1", "ghl_2"}

    def test_paid_record_without_email_does_not_shadow_events(self, make_record):
        paid = [make_record("stripe_1", email="")]
        events = [make_record("ghl_1", source="gohighlevel", email="x@y.com")]

        assert len(merge(paid, events)) == 2

    def test_second_appointment_from_paying_patient_is_dropped(self, make_record):
        # Email-only dedup: an unrelated appointment is treated as covered
        paid = [make_record("stripe_1", email="pat@example.com", day=2)]
        events = [make_record("ghl_later", source="gohighlevel", email="pat@example.com", day=25)]

        assert [r.id for r in merge(paid, events)] == ["stripe_1"]

    def test_duplicate_paid_emails_are_kept(self, make_record):
        paid = [
            make_record("stripe_1", email="same@x.com", day=1),
            make_record("stripe_2", email="SAME@x.com", day=2),
        ]

        assert len(merge(paid, [])) == 2


class TestMergeEdgeCases:
    def test_empty_paid_passes_all_events(self, make_record):
        events = [
            make_record("ghl_1", source="gohighlevel", email="a@x.com", day=1),
            make_record("ghl_2", source="gohighlevel", email="a@x.com", day=2),
        ]

        assert {r.id for r in merge([], events)} == {"ghl_1", "ghl_2"}

    def test_empty_events_returns_paid(self, make_record):
        paid = [make_record("stripe_1", day=4), make_record("stripe_2", day=8)]

        assert [r.id for r in merge(paid, [])] == ["stripe_2", "stripe_1"]

    def test_both_empty(self):
        assert merge([], []) == []


class TestMergeOrdering:
    def test_sorted_newest_first(self, make_record):
        paid = [make_record("stripe_1", email="a@x", day=3), make_record("stripe_2", email="b@x", day=20)]
        events = [
            make_record("ghl_1", source="gohighlevel", day=11),
            make_record("ghl_2", source="gohighlevel", day=28),
        ]

        result = merge(paid, events)

        dates = [r.date for r in result]
        assert dates == sorted(dates, reverse=True)
        assert [r.id for r in result] == ["ghl_2", "stripe_2", "ghl_1", "stripe_1"]

    def test_does_not_mutate_inputs(self, make_record):
        paid = [make_record("stripe_1", day=1), make_record("stripe_2", day=9)]
        snapshot = list(paid)

        merge(paid, [])

        assert paid == snapshot
