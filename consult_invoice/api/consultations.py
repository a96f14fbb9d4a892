from fastapi import APIRouter, Request

from consult_invoice.middleware.rate_limit import CONSULTATIONS_RATE_LIMIT, limiter
from consult_invoice.models import ConsultationsResponse, ErrorResponse
from consult_invoice.periods import Period
from consult_invoice.services.reconciler import ConsultationReconciler

router = APIRouter()


@router.get(
    "/consultations",
    response_model=ConsultationsResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit(CONSULTATIONS_RATE_LIMIT)
async def list_consultations(
    request: Request, year: str | None = None, month: str | None = None
) -> ConsultationsResponse:
    """Reconciled Stripe + Go High Level consultations for one month.

    Without ``year``/``month`` the current calendar month is used.
    """
    period = Period.from_query(year, month)
    reconciler: ConsultationReconciler = request.app.state.reconciler
    reconciliation = await reconciler.reconcile(period)
    return reconciliation.to_response()
