import logging

from fastapi import APIRouter, Body, Request

from consult_invoice.billing.summary import summarize
from consult_invoice.middleware.rate_limit import SUMMARY_RATE_LIMIT, limiter
from consult_invoice.models import ErrorResponse, SummaryRequest, SummaryResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/summary",
    response_model=SummaryResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit(SUMMARY_RATE_LIMIT)
async def invoice_summary(
    request: Request, body: SummaryRequest | None = Body(default=None)
) -> SummaryResponse:
    """Stateless summary of the consultations the client has approved."""
    consultations = body.consultations if body is not None else []
    summary = summarize(consultations)
    logger.info(
        "Summary for %d consultations: %d approved, total %s",
        len(consultations),
        summary.approved_count,
        summary.grand_total,
    )
    return SummaryResponse(summary=summary)
