import logging
from collections.abc import Iterable

import httpx

from consult_invoice.models import ConsultationRecord, ConsultationsResponse, Summary, SummaryResponse
from consult_invoice.periods import Period

logger = logging.getLogger(__name__)


class ConsultationsUnavailable(Exception):
    """The API answered but reported ``success: false``."""


class ConsultationsAPIClient:
    """Thin client for the consultation invoice API.

    Transport problems surface as ``httpx.HTTPError``; an API-level failure
    envelope surfaces as ``ConsultationsUnavailable``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout, connect=5.0),
        )

    @staticmethod
    def _payload(response: httpx.Response) -> dict:
        try:
            payload = response.json()
        except ValueError:
            response.raise_for_status()
            raise ConsultationsUnavailable(f"Non-JSON response ({response.status_code})")
        if not isinstance(payload, dict) or not payload.get("success"):
            error = payload.get("error") if isinstance(payload, dict) else None
            raise ConsultationsUnavailable(error or f"Request failed ({response.status_code})")
        return payload

    async def fetch_consultations(self, period: Period) -> ConsultationsResponse:
        response = await self._client.get(
            "/consultations", params={"year": period.year, "month": period.month}
        )
        return ConsultationsResponse.model_validate(self._payload(response))

    async def request_summary(self, records: Iterable[ConsultationRecord]) -> Summary:
        body = {
            "consultations": [r.model_dump(mode="json", by_alias=True) for r in records]
        }
        response = await self._client.post("/summary", json=body)
        return SummaryResponse.model_validate(self._payload(response)).summary

    async def close(self) -> None:
        await self._client.aclose()
