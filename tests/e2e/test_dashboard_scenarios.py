"""
E2E scenarios for the payments view against the stub node.

The stub node (mock_node/) is served in-process through httpx.ASGITransport,
so the full path is exercised: view synchronizer, fetcher, HTTP client, wire
normalization, and the node's own filtering and paging.

Stub node contents: 12 payments (6 outgoing, 4 incoming, 2 forwarded) between
2023-12-31 and 2024-02-14.
"""

from datetime import date

import httpx
import pytest

from payments_dashboard.domain.models import (
    CategoryCounts,
    ComparisonOperator,
    Direction,
    FilterCriteria,
    SettlementState,
    ViewStatus,
)
from payments_dashboard.infrastructure.clients.payments import PaymentsClient
from payments_dashboard.services.counts import CountAggregator
from payments_dashboard.services.fetcher import CollectionFetcher
from payments_dashboard.services.synchronizer import ViewSynchronizer
from tests.conftest import NODE_URL

JANUARY_SETTLED_OUTGOING = FilterCriteria(
    payment_state=SettlementState.SETTLED,
    operator=ComparisonOperator.GTE,
    value=1000,
    date_from=date(2024, 1, 1),
    date_to=date(2024, 1, 31),
)


class FailingCountTransport(httpx.AsyncBaseTransport):
    """Fails the incoming badge count request, forwards everything else"""

    def __init__(self, inner: httpx.AsyncBaseTransport):
        self.inner = inner

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        params = request.url.params
        if params.get("type") == "incoming" and params.get("per_page") == "1":
            return httpx.Response(503, request=request)
        return await self.inner.handle_async_request(request)


def view_for(client: PaymentsClient, page_size: int) -> ViewSynchronizer:
    return ViewSynchronizer(CollectionFetcher(client), CountAggregator(client), page_size=page_size, max_visible_pages=5)


@pytest.mark.integration
async def test_filtered_outgoing_tab_one_per_page(node_client: PaymentsClient):
    """
    settled, >= 1000 sats, January 2024, outgoing tab, one payment per page
    Expected: 3 pages, badges still show the unfiltered totals
    """
    view = view_for(node_client, page_size=1)
    mounted = await view.mount()
    assert mounted.counts == CategoryCounts(all=12, incoming=4, outgoing=6)

    await view.set_direction(Direction.OUTGOING)
    snapshot = await view.apply_filter(JANUARY_SETTLED_OUTGOING)

    assert snapshot.status is ViewStatus.READY
    assert snapshot.pagination.total_items == 3
    assert snapshot.pagination.total_pages == 3
    assert snapshot.pagination.page == 1
    assert snapshot.pagination.page_numbers == (1, 2, 3)
    assert len(snapshot.records) == 1
    assert snapshot.records[0].payment_id == "out-03"
    assert snapshot.counts == mounted.counts

    last = await view.go_to_page(3)
    assert [r.payment_id for r in last.records] == ["out-01"]
    assert last.criteria == JANUARY_SETTLED_OUTGOING
    assert not last.pagination.has_next


@pytest.mark.integration
async def test_incoming_count_failure_does_not_affect_view(node_transport: httpx.ASGITransport):
    """
    incoming badge request fails, all and outgoing succeed
    Expected: incoming reads 0 and is flagged, the active tab loads normally
    """
    client = PaymentsClient(base_url=NODE_URL, transport=FailingCountTransport(node_transport))
    view = view_for(client, page_size=5)

    snapshot = await view.mount()

    assert snapshot.counts.all == 12
    assert snapshot.counts.outgoing == 6
    assert snapshot.counts.incoming == 0
    assert snapshot.counts.errors == frozenset({Direction.INCOMING})
    assert snapshot.status is ViewStatus.READY
    assert snapshot.pagination.total_pages == 3
    assert len(snapshot.records) == 5

    # The incoming tab itself still works; only its badge failed
    incoming = await view.set_direction(Direction.INCOMING)
    assert incoming.pagination.total_items == 4


@pytest.mark.integration
async def test_boundary_day_is_inclusive(node_client: PaymentsClient):
    """A payment at 23:00 on the last day of the range is included"""
    view = view_for(node_client, page_size=10)
    await view.mount()

    snapshot = await view.apply_filter(FilterCriteria(date_from=date(2024, 1, 31), date_to=date(2024, 1, 31)))

    assert [r.payment_id for r in snapshot.records] == ["out-03"]


@pytest.mark.integration
async def test_pending_incoming_payments(node_client: PaymentsClient):
    view = view_for(node_client, page_size=10)
    await view.mount()
    await view.set_direction("incoming")

    snapshot = await view.apply_filter(FilterCriteria(payment_state=SettlementState.PENDING))

    assert [r.payment_id for r in snapshot.records] == ["in-02"]
    assert snapshot.records[0].created_at.microsecond == 500000
