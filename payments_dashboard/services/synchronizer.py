"""View synchronizer - the payments view state machine"""

import asyncio
import itertools
import logging
import time
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from payments_dashboard.config import settings
from payments_dashboard.domain.exceptions import FetchError, StaleResponseDiscarded
from payments_dashboard.domain.filters import FilterModel
from payments_dashboard.domain.models import (
    CategoryCounts,
    Direction,
    FilterCriteria,
    PaymentRecord,
    ViewStatus,
)
from payments_dashboard.domain.pagination import PaginationState, clamp_page, paginate
from payments_dashboard.infrastructure.observability.logging import log_fetch_cycle
from payments_dashboard.infrastructure.observability.metrics import stale_response_counter
from payments_dashboard.services.counts import CountAggregator
from payments_dashboard.services.fetcher import CollectionFetcher, FetchResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewSnapshot:
    """Everything the rendering layer reads, replaced as one unit"""

    status: ViewStatus
    direction: Direction
    criteria: FilterCriteria
    records: Tuple[PaymentRecord, ...]
    pagination: PaginationState
    counts: CategoryCounts
    error: Optional[FetchError] = None


class ViewSynchronizer:
    """
    Owns the payments view and is its only mutation path.

    State machine per fetch cycle:
        idle --mount, filter, direction or page--> loading (badge counts load once here)
        ready|error --filter / direction / page--> loading
        loading --resolved--> ready
        loading --failed--> error

    Filter and direction changes reset the page to 1; page changes keep the
    filter. Only the most recent cycle may write the snapshot; anything older
    is discarded when it resolves.
    """

    def __init__(
        self,
        fetcher: CollectionFetcher,
        aggregator: CountAggregator,
        page_size: int | None = None,
        max_visible_pages: int | None = None,
    ):
        self.fetcher = fetcher
        self.aggregator = aggregator
        self.page_size = page_size or settings.page_size
        self.max_visible_pages = max_visible_pages or settings.max_visible_pages

        self._filters = FilterModel()
        self._page = 1
        self._cycles = itertools.count(1)
        self._live_cycle = 0
        self._has_loaded = False
        self._snapshot = ViewSnapshot(
            status=ViewStatus.IDLE,
            direction=Direction.ALL,
            criteria=self._filters.criteria,
            records=(),
            pagination=self._empty_pagination(),
            counts=CategoryCounts(),
        )

    def _empty_pagination(self) -> PaginationState:
        return paginate(0, self.page_size, 1, self.max_visible_pages)

    @property
    def status(self) -> ViewStatus:
        return self._snapshot.status

    @property
    def criteria(self) -> FilterCriteria:
        return self._filters.criteria

    @property
    def direction(self) -> Direction:
        return self._snapshot.direction

    @property
    def page(self) -> int:
        return self._page

    def snapshot(self) -> ViewSnapshot:
        return self._snapshot

    async def mount(self) -> ViewSnapshot:
        """Initial load: first page and badge counts, fetched concurrently"""
        if self._snapshot.status is not ViewStatus.IDLE:
            logger.debug("Mount ignored", extra={"status": self._snapshot.status.value})
            return self._snapshot

        await self._cycle()
        return self._snapshot

    async def _cycle(self) -> None:
        """Run one fetch cycle; the first cycle out of idle also loads the badge counts"""
        if self._snapshot.status is not ViewStatus.IDLE:
            await self._run_cycle()
            return

        # Leave idle before yielding so a concurrent caller does not load counts twice
        self._snapshot = replace(self._snapshot, status=ViewStatus.LOADING)
        await asyncio.gather(self._load_counts(), self._run_cycle())

    async def apply_filter(self, criteria: FilterCriteria) -> ViewSnapshot:
        """
        Replace the active filter and reload from page 1.

        Raises:
            InvalidFilterError: Criteria rejected; nothing is fetched and the
                previous filter stays active
        """
        self._filters.apply(criteria)
        self._page = 1
        await self._cycle()
        return self._snapshot

    async def clear_filter(self) -> ViewSnapshot:
        return await self.apply_filter(FilterCriteria())

    async def set_direction(self, direction: Direction | str) -> ViewSnapshot:
        """Switch tab and reload from page 1, keeping the filter"""
        self._snapshot = replace(self._snapshot, direction=Direction(direction))
        self._page = 1
        await self._cycle()
        return self._snapshot

    async def go_to_page(self, page: int) -> ViewSnapshot:
        """Load another page of the current result; out-of-range pages are clamped"""
        self._page = clamp_page(page, self._snapshot.pagination.total_pages)
        await self._cycle()
        return self._snapshot

    async def _load_counts(self) -> None:
        counts = await self.aggregator.refresh_counts()
        self._snapshot = replace(self._snapshot, counts=counts)

    async def _run_cycle(self) -> None:
        cycle = next(self._cycles)
        self._live_cycle = cycle
        direction = self._snapshot.direction
        criteria = self._filters.criteria
        page = self._page

        self._snapshot = replace(self._snapshot, status=ViewStatus.LOADING, criteria=criteria)
        started = time.perf_counter()

        try:
            result = await self.fetcher.fetch(direction, criteria, page, self.page_size)
            pagination = paginate(result.total_items, self.page_size, page, self.max_visible_pages)
            # Result shrank under the requested page: re-anchor and load the last real page
            if result.error is None and result.total_items > 0 and pagination.page != page:
                if cycle != self._live_cycle:
                    self._discard(cycle, direction)
                    return
                page = pagination.page
                self._page = page
                result = await self.fetcher.fetch(direction, criteria, page, self.page_size)
                pagination = paginate(result.total_items, self.page_size, page, self.max_visible_pages)
        except StaleResponseDiscarded as e:
            logger.debug("Stale response discarded", extra={"direction": e.direction, "token": e.token, "latest": e.latest})
            return
        except Exception as e:
            logger.error(
                f"Unexpected fetch failure: {e}",
                exc_info=True,
                extra={"cycle": cycle, "direction": direction.value, "page": page},
            )
            result = FetchResult(
                direction=direction,
                page=page,
                token=self.fetcher.latest_token(direction) or 0,
                records=(),
                total_items=0,
                error=FetchError(direction=direction.value, message=f"Unexpected error: {e}"),
            )
            pagination = self._snapshot.pagination

        if cycle != self._live_cycle:
            self._discard(cycle, direction)
            return

        self._install(result, pagination)
        log_fetch_cycle(
            direction=direction.value,
            page=self._snapshot.pagination.page,
            total_items=self._snapshot.pagination.total_items,
            status=self._snapshot.status.value,
            duration_ms=(time.perf_counter() - started) * 1000,
            error=result.error.message if result.error else None,
        )

    def _discard(self, cycle: int, direction: Direction) -> None:
        # Fetcher tokens are per direction; a tab switch is caught here instead
        stale_response_counter.inc()
        logger.debug(
            "Superseded cycle discarded",
            extra={"cycle": cycle, "live_cycle": self._live_cycle, "direction": direction.value},
        )

    def _install(self, result: FetchResult, pagination: PaginationState) -> None:
        if result.error is not None:
            if self._has_loaded:
                # Keep the last good records and pages behind the error
                self._snapshot = replace(self._snapshot, status=ViewStatus.ERROR, error=result.error)
            else:
                self._snapshot = replace(
                    self._snapshot,
                    status=ViewStatus.ERROR,
                    error=result.error,
                    records=(),
                    pagination=self._empty_pagination(),
                )
            # The next page change clamps against the pager that is on screen
            self._page = self._snapshot.pagination.page
            return

        self._page = pagination.page
        self._has_loaded = True
        self._snapshot = replace(
            self._snapshot,
            status=ViewStatus.READY,
            error=None,
            records=result.records,
            pagination=pagination,
        )
