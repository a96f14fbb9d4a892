"""Rate resolution is total and case-insensitive."""

from decimal import Decimal

import pytest

from consult_invoice.billing.rates import DEFAULT_RATE, SERVICE_RATES, resolve_rate


class TestResolveRate:
    @pytest.mark.parametrize(
        "service_type, expected",
        [
            ("Initial Consultation", Decimal("100")),
            ("Consultation", Decimal("100")),
            ("Pathology Review", Decimal("85")),
            ("Follow-up Consultation", Decimal("50")),
            ("Repeat Script", Decimal("33")),
        ],
    )
    def test_exact_match(self, service_type, expected):
        assert resolve_rate(service_type) == expected

    @pytest.mark.parametrize("service_type", ["pathology review", "PATHOLOGY REVIEW", "Pathology review"])
    def test_case_insensitive_match(self, service_type):
        assert resolve_rate(service_type) == Decimal("85")

    @pytest.mark.parametrize(
        "service_type",
        ["Telehealth Check-in", "Pathology", "Consultation - extended", "", None, "   "],
    )
    def test_unknown_types_get_default(self, service_type):
        assert resolve_rate(service_type) == DEFAULT_RATE == Decimal("100")

    def test_no_partial_matching(self):
        # "Review" is a substring of "Pathology Review" but must not match
        assert resolve_rate("Review") == DEFAULT_RATE

    def test_rate_table_is_read_only(self):
        with pytest.raises(TypeError):
            SERVICE_RATES["Consultation"] = Decimal("1")  # type: ignore[index]
