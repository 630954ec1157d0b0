"""CSV export of a payments result, every page of it"""

import csv
import io
import logging
from typing import AsyncIterator

from payments_dashboard.config import settings
from payments_dashboard.domain.models import Direction, FilterCriteria, PaymentRecord
from payments_dashboard.domain.pagination import compute_pages
from payments_dashboard.infrastructure.clients.payments import PaymentsClient
from payments_dashboard.services.fetcher import build_query

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = (
    "payment_id",
    "direction",
    "state",
    "amount_sat",
    "routing_fee_sat",
    "created_at",
    "description",
)


def to_row(record: PaymentRecord) -> tuple:
    return (
        record.payment_id,
        record.direction.value,
        record.state.value,
        record.amount_sat,
        "" if record.routing_fee_sat is None else record.routing_fee_sat,
        record.created_at.isoformat(),
        record.description or "",
    )


class PaymentExporter:
    """
    Renders the payments matching a direction and filter as CSV.

    Pages are requested with the same query parameters the view uses, so an
    export holds exactly what the view pages through.
    """

    def __init__(self, client: PaymentsClient, page_size: int | None = None):
        self.client = client
        self.page_size = page_size or settings.export_page_size

    async def iter_csv(self, direction: Direction, criteria: FilterCriteria) -> AsyncIterator[str]:
        """
        Yield CSV text one node page at a time; the first chunk carries the header.

        Nothing is yielded before the first page is read, so a node failure
        surfaces before any output.

        Raises:
            PaymentsAPIError: When a page cannot be read from the node
        """
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(EXPORT_COLUMNS)

        page = 1
        exported = 0
        while True:
            result = await self.client.list_payments(build_query(direction, criteria, page, self.page_size))
            writer.writerows(to_row(r) for r in result.records)
            exported += len(result.records)

            yield buffer.getvalue()
            buffer.seek(0)
            buffer.truncate(0)

            if not result.records or page >= compute_pages(result.total_items, self.page_size):
                break
            page += 1

        logger.info(
            "Payments exported",
            extra={"direction": direction.value, "pages": page, "exported": exported},
        )
