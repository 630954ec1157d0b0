"""Collection fetcher - one page of payments per request, newest request wins"""

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from payments_dashboard.domain.exceptions import FetchError, PaymentsAPIError, StaleResponseDiscarded
from payments_dashboard.domain.filters import to_query_params
from payments_dashboard.domain.models import Direction, FilterCriteria, PaymentRecord
from payments_dashboard.infrastructure.clients.payments import PaymentsClient
from payments_dashboard.infrastructure.observability.metrics import (
    payments_fetch_latency_histogram,
    record_fetch,
    stale_response_counter,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one fetch; error is set when the node could not be read"""

    direction: Direction
    page: int
    token: int
    records: Tuple[PaymentRecord, ...]
    total_items: int
    error: Optional[FetchError] = None


def build_query(direction: Direction, criteria: FilterCriteria, page: int, page_size: int) -> Dict[str, str]:
    """Query parameters for one page; "all" and unset filter fields are left out"""
    params = to_query_params(criteria)
    if direction is not Direction.ALL:
        params["type"] = direction.value
    params["page"] = str(page)
    params["per_page"] = str(page_size)
    return params


class CollectionFetcher:
    """
    Fetches pages of payments and drops responses that arrive out of order.

    Every request gets a token from a monotonically increasing sequence and the
    latest token per direction is remembered. A response whose token is no
    longer the latest for its direction raises StaleResponseDiscarded.
    """

    def __init__(self, client: PaymentsClient):
        self.client = client
        self._sequence = itertools.count(1)
        self._latest: Dict[Direction, int] = {}

    def latest_token(self, direction: Direction) -> Optional[int]:
        return self._latest.get(direction)

    def _ensure_latest(self, direction: Direction, token: int) -> None:
        latest = self._latest.get(direction, token)
        if token != latest:
            stale_response_counter.inc()
            record_fetch(direction.value, "stale")
            raise StaleResponseDiscarded(direction.value, token, latest)

    async def fetch(
        self,
        direction: Direction,
        criteria: FilterCriteria,
        page: int,
        page_size: int,
    ) -> FetchResult:
        """
        Fetch one page of payments for a direction tab.

        Raises:
            StaleResponseDiscarded: When a newer fetch for the same direction
                was issued while this one was in flight
        """
        token = next(self._sequence)
        self._latest[direction] = token
        params = build_query(direction, criteria, page, page_size)

        try:
            with payments_fetch_latency_histogram.time():
                payment_page = await self.client.list_payments(params)
        except PaymentsAPIError as e:
            self._ensure_latest(direction, token)
            record_fetch(direction.value, "error")
            logger.warning(
                "Payments fetch failed",
                extra={"direction": direction.value, "page": page, "token": token, "error": str(e)},
            )
            return FetchResult(
                direction=direction,
                page=page,
                token=token,
                records=(),
                total_items=0,
                error=FetchError(direction=direction.value, message=str(e)),
            )

        self._ensure_latest(direction, token)
        record_fetch(direction.value, "ok")
        return FetchResult(
            direction=direction,
            page=page,
            token=token,
            records=payment_page.records,
            total_items=payment_page.total_items,
        )
