from fastapi import APIRouter, Request

from consult_invoice.billing.rates import DEFAULT_RATE, SERVICE_RATES
from consult_invoice.middleware.rate_limit import RATES_RATE_LIMIT, limiter
from consult_invoice.models import RatesResponse

router = APIRouter()


@router.get("/rates", response_model=RatesResponse)
@limiter.limit(RATES_RATE_LIMIT)
async def service_rates(request: Request) -> RatesResponse:
    return RatesResponse(rates=dict(SERVICE_RATES), default_rate=DEFAULT_RATE)
