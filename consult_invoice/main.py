import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from consult_invoice.api import consultations, health, rates, summary
from consult_invoice.config import get_settings
from consult_invoice.logging_config import configure_logging
from consult_invoice.middleware.error_handler import (
    generic_exception_handler,
    invalid_period_handler,
    request_validation_handler,
)
from consult_invoice.middleware.rate_limit import limiter
from consult_invoice.periods import InvalidPeriodError
from consult_invoice.services.ghl_calendar import GHLCalendarSource
from consult_invoice.services.reconciler import ConsultationReconciler
from consult_invoice.services.stripe_charges import StripeChargeSource

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the source adapters at startup, close their HTTP clients at shutdown."""
    settings = get_settings()
    configure_logging("consult-invoice-api", settings.env)

    reconciler = ConsultationReconciler(
        StripeChargeSource(settings),
        GHLCalendarSource(settings),
    )
    app.state.reconciler = reconciler
    logger.info(
        "Consultation invoice API started (env=%s, sources=%s)",
        settings.env,
        reconciler.source_checks(),
    )
    yield

    await reconciler.close()
    logger.info("Consultation invoice API shut down")


app = FastAPI(
    title="Consultation Invoice Reconciler",
    version=VERSION,
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Error envelopes
app.add_exception_handler(InvalidPeriodError, invalid_period_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# CORS
_settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(health.router)
for _router in (consultations.router, summary.router, rates.router):
    app.include_router(_router)
    app.include_router(_router, prefix="/api")


@app.options("/{path:path}", include_in_schema=False)
async def options_ok(path: str) -> Response:
    return Response(status_code=200)
