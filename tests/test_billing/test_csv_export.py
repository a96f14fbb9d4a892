from datetime import datetime, timezone

from consult_invoice.billing.csv_export import export_csv, export_filename, format_short_date
from consult_invoice.periods import Period


class TestExportCSV:
    def test_layout(self, make_record):
        records = [
            make_record(
                "r1",
                status="approved",
                patient_name="Jane Doe",
                service_type="Pathology Review",
                day=5,
            ),
            make_record("r2", status="pending", patient_name="Not Billed"),
            make_record(
                "r3",
                source="gohighlevel",
                status="approved",
                patient_name="Bob Wilson",
                service_type="Repeat Script",
                day=12,
            ),
        ]

        lines = export_csv(records).split("\n")

        assert lines == [
            '"Date","Patient Name","Service Type","Source","Amount"',
            '"Mar 5, 2025","Jane Doe","Pathology Review","stripe","85.00"',
            '"Mar 12, 2025","Bob Wilson","Repeat Script","gohighlevel","33.00"',
            "",
            '"","","","Total:","118.00"',
            "",
        ]

    def test_no_approved_records(self, make_record):
        content = export_csv([make_record("r1", status="rejected")])

        assert content == (
            '"Date","Patient Name","Service Type","Source","Amount"\n'
            "\n"
            '"","","","Total:","0.00"\n'
        )

    def test_quotes_embedded_quotes(self, make_record):
        record = make_record("r1", status="approved", patient_name='Robert "Bob" Smith')

        assert '"Robert ""Bob"" Smith"' in export_csv([record])


def test_short_date_has_no_zero_padding():
    assert format_short_date(datetime(2025, 1, 5, tzinfo=timezone.utc)) == "Jan 5, 2025"


def test_export_filename_pads_month():
    assert export_filename(Period(2025, 3)) == "invoice_2025_03.csv"
