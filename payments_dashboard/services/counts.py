"""Category badge counts - global totals, never filtered"""

import asyncio
import logging

from payments_dashboard.domain.exceptions import PaymentsAPIError
from payments_dashboard.domain.models import COUNTED_DIRECTIONS, CategoryCounts, Direction, FilterCriteria
from payments_dashboard.infrastructure.clients.payments import PaymentsClient
from payments_dashboard.infrastructure.observability.metrics import category_count_failure_counter
from payments_dashboard.services.fetcher import build_query

logger = logging.getLogger(__name__)


class CountAggregator:
    """Reads the all / incoming / outgoing totals with three independent requests"""

    def __init__(self, client: PaymentsClient):
        self.client = client

    async def _count(self, direction: Direction) -> int:
        # per_page=1: only the total is wanted, the record is thrown away
        page = await self.client.list_payments(build_query(direction, FilterCriteria(), page=1, page_size=1))
        return page.total_items

    async def refresh_counts(self) -> CategoryCounts:
        """
        Fetch all badge counts concurrently.

        A category whose request fails reads 0 and is listed in errors; the
        other categories keep their real values.
        """
        results = await asyncio.gather(
            *(self._count(d) for d in COUNTED_DIRECTIONS),
            return_exceptions=True,
        )

        values = {}
        errors = set()
        for direction, result in zip(COUNTED_DIRECTIONS, results):
            if isinstance(result, Exception):
                category_count_failure_counter.labels(category=direction.value).inc()
                logger.warning(
                    "Category count failed",
                    extra={"category": direction.value, "error": str(result)},
                )
                values[direction.value] = 0
                errors.add(direction)
            elif isinstance(result, BaseException):
                raise result
            else:
                values[direction.value] = result

        return CategoryCounts(errors=frozenset(errors), **values)
