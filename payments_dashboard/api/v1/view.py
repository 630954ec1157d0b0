"""/v1/payments/view - Paginated, filterable payments view"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from payments_dashboard.api.dependencies import get_request_id, get_synchronizer
from payments_dashboard.api.v1.schemas import DirectionRequest, FilterRequest, PageRequest, ViewResponse
from payments_dashboard.domain.exceptions import InvalidFilterError
from payments_dashboard.domain.models import ViewStatus
from payments_dashboard.services.synchronizer import ViewSynchronizer

router = APIRouter()


@router.get("/payments/view", response_model=ViewResponse)
async def get_view(sync: ViewSynchronizer = Depends(get_synchronizer)):
    """
    Current snapshot of the payments view.

    The first call mounts the view: loads page 1 of all payments and the
    badge counts.
    """
    if sync.status is ViewStatus.IDLE:
        await sync.mount()
    return ViewResponse.from_snapshot(sync.snapshot())


@router.post("/payments/view/filter", response_model=ViewResponse)
async def apply_filter(
    request_body: FilterRequest,
    request: Request,
    sync: ViewSynchronizer = Depends(get_synchronizer),
):
    """
    Replace the active filter and reload from page 1.

    Fields left out of the body are unconstrained. Badge counts are not
    refreshed; they stay global totals.
    """
    try:
        snapshot = await sync.apply_filter(request_body.to_criteria())
    except InvalidFilterError as e:
        logging.warning(f"Invalid filter: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=400, detail=str(e))

    return ViewResponse.from_snapshot(snapshot)


@router.post("/payments/view/direction", response_model=ViewResponse)
async def set_direction(
    request_body: DirectionRequest,
    sync: ViewSynchronizer = Depends(get_synchronizer),
):
    """Switch direction tab; page resets to 1"""
    snapshot = await sync.set_direction(request_body.direction)
    return ViewResponse.from_snapshot(snapshot)


@router.post("/payments/view/page", response_model=ViewResponse)
async def go_to_page(
    request_body: PageRequest,
    sync: ViewSynchronizer = Depends(get_synchronizer),
):
    snapshot = await sync.go_to_page(request_body.page)
    return ViewResponse.from_snapshot(snapshot)
