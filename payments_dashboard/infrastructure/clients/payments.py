"""Node payments API HTTP client"""

import logging
from typing import Dict

import httpx
from pydantic import ValidationError

from payments_dashboard.config import settings
from payments_dashboard.domain.exceptions import PaymentNotFoundError, PaymentsAPIError
from payments_dashboard.domain.models import PaymentPage, PaymentRecord
from payments_dashboard.infrastructure.clients.schemas import WireEnvelope, WirePayment

logger = logging.getLogger(__name__)


class PaymentsClient:
    """Client for the node's payments collection resource"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        path: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.payments_api_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.path = path or settings.payments_path
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def _get_envelope(self, client: httpx.AsyncClient, url: str, params: Dict[str, str] | None = None) -> WireEnvelope:
        try:
            response = await client.get(url, params=params)
            response.raise_for_status()
            envelope = WireEnvelope.model_validate(response.json())
        except httpx.TimeoutException as e:
            raise PaymentsAPIError(f"Payments API timeout after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise PaymentNotFoundError(f"Payments API: {url} not found") from e
            raise PaymentsAPIError(f"Payments API error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise PaymentsAPIError(f"Payments API unreachable: {e}") from e
        except (ValueError, ValidationError) as e:
            raise PaymentsAPIError(f"Invalid response envelope from payments API: {e}") from e

        if envelope.success is False:
            raise PaymentsAPIError(f"Payments API reported failure: {envelope.message or 'no message'}")
        return envelope

    async def list_payments(self, params: Dict[str, str]) -> PaymentPage:
        """
        Fetch one page of payments.

        Args:
            params: Query parameters, already stripped of unset filter fields

        Raises:
            PaymentsAPIError: On timeout, HTTP errors, or invalid response
        """
        async with self._client() as client:
            envelope = await self._get_envelope(client, self.path, params=params)

        try:
            records = tuple(p.to_record() for p in envelope.payments())
        except (ValueError, ValidationError) as e:
            raise PaymentsAPIError(f"Invalid payment data from node: {e}") from e

        total = envelope.total_items(returned=len(records))
        logger.debug(
            "Fetched payments page",
            extra={"params": params, "returned": len(records), "total_items": total},
        )
        return PaymentPage(records=records, total_items=total)

    async def get_payment(self, payment_id: str) -> tuple[PaymentRecord, WirePayment]:
        """
        Fetch a single payment for the detail view.

        Returns the normalized record together with the wire object, which may
        carry node-computed extras such as amount_usd.

        Raises:
            PaymentNotFoundError: When the node does not know the id
            PaymentsAPIError: On timeout, HTTP errors, or invalid response
        """
        async with self._client() as client:
            envelope = await self._get_envelope(client, f"{self.path}/{payment_id}")

        try:
            wire = envelope.payment()
            return wire.to_record(), wire
        except (ValueError, ValidationError) as e:
            raise PaymentsAPIError(f"Invalid payment data from node: {e}") from e
