from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from consult_invoice.billing.rates import resolve_rate

Source = Literal["stripe", "gohighlevel"]
Status = Literal["pending", "approved", "rejected"]
SourceStatus = Literal["ok", "failed", "not_configured"]

STATUSES: tuple[str, ...] = ("pending", "approved", "rejected")
SOURCES: tuple[str, ...] = ("stripe", "gohighlevel")

# Decimal in Python, plain JSON number on the wire.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConsultationRecord(CamelModel):
    id: str
    source: Source
    patient_name: str = "Unknown"
    patient_email: str = ""
    service_type: str = "Consultation"
    amount: Money = Decimal("0")
    calculated_amount: Money
    date: datetime
    status: Status = "pending"
    stripe_charge_id: str | None = None
    ghl_event_id: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _derive_calculated_amount(cls, data: Any) -> Any:
        # calculatedAmount always comes from the rate table, never from amount
        if isinstance(data, dict):
            current = data.get("calculatedAmount", data.get("calculated_amount"))
            if current is None:
                service_type = data.get("serviceType", data.get("service_type"))
                data = {k: v for k, v in data.items() if k != "calculated_amount"}
                data["calculatedAmount"] = resolve_rate(service_type)
        return data

    @field_validator("patient_email", "patient_name", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("service_type", mode="before")
    @classmethod
    def _default_service_type(cls, v: Any) -> Any:
        return v or "Consultation"

    @field_validator("date")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)

    def with_status(self, status: Status) -> ConsultationRecord:
        return self.model_copy(update={"status": status})


@dataclass
class SourceResult:
    """Outcome of one source adapter call. Adapters never raise."""

    source: Source
    records: list[ConsultationRecord] = field(default_factory=list)
    status: SourceStatus = "ok"
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


class PeriodInfo(CamelModel):
    year: int
    month: int
    start_date: datetime
    end_date: datetime


class SourceCounts(BaseModel):
    stripe: int = 0
    gohighlevel: int = 0
    total: int = 0


class SourceStatusInfo(BaseModel):
    stripe: SourceStatus = "ok"
    gohighlevel: SourceStatus = "ok"


class ConsultationsResponse(CamelModel):
    success: bool = True
    period: PeriodInfo
    consultations: list[ConsultationRecord] = Field(default_factory=list)
    sources: SourceCounts = Field(default_factory=SourceCounts)
    source_status: SourceStatusInfo = Field(default_factory=SourceStatusInfo)


class ServiceLine(CamelModel):
    service_type: str
    count: int
    rate: Money
    subtotal: Money


class Summary(CamelModel):
    service_breakdown: list[ServiceLine] = Field(default_factory=list)
    grand_total: Money = Decimal("0")
    approved_count: int = 0
    rejected_count: int = 0
    pending_count: int = 0
    rates: dict[str, Money] = Field(default_factory=dict)


class SummaryRequest(CamelModel):
    consultations: list[ConsultationRecord] = Field(default_factory=list)


class SummaryResponse(CamelModel):
    success: bool = True
    summary: Summary


class RatesResponse(CamelModel):
    success: bool = True
    rates: dict[str, Money]
    default_rate: Money


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str = "0.1.0"
    environment: str
    checks: dict[str, str] = Field(default_factory=dict)
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
