"""Service-type rate table.

This is the only definition of practitioner rates. The API, the summary
endpoint and the review client all import it from here, and ``GET /rates``
publishes it for anything outside the package.
"""

from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

SERVICE_RATES: Mapping[str, Decimal] = MappingProxyType(
    {
        "Initial Consultation": Decimal("100.00"),
        "Consultation": Decimal("100.00"),
        "Pathology Review": Decimal("85.00"),
        "Follow-up Consultation": Decimal("50.00"),
        "Repeat Script": Decimal("33.00"),
    }
)

DEFAULT_RATE = Decimal("100.00")

_LOWERED_RATES: Mapping[str, Decimal] = MappingProxyType(
    {name.lower(): rate for name, rate in SERVICE_RATES.items()}
)


def resolve_rate(service_type: str | None) -> Decimal:
    """Return the flat fee owed for `service_type`.

    Exact match first, then case-insensitive, then ``DEFAULT_RATE``.
    Never raises.
    """
    if not service_type:
        return DEFAULT_RATE
    rate = SERVICE_RATES.get(service_type)
    if rate is not None:
        return rate
    return _LOWERED_RATES.get(service_type.lower(), DEFAULT_RATE)
