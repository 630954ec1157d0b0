"""GET /v1/payments/export - Download the view's current result as CSV"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from payments_dashboard.api.dependencies import get_payments_client, get_request_id, get_synchronizer
from payments_dashboard.domain.exceptions import PaymentsAPIError
from payments_dashboard.infrastructure.clients.payments import PaymentsClient
from payments_dashboard.services.exporter import PaymentExporter
from payments_dashboard.services.synchronizer import ViewSynchronizer

router = APIRouter()


@router.get("/payments/export")
async def export_payments(
    request: Request,
    sync: ViewSynchronizer = Depends(get_synchronizer),
    payments_client: PaymentsClient = Depends(get_payments_client),
):
    """
    Stream every payment of the active tab and filter as CSV.

    The view itself is not touched: no page change, no reload.
    """
    request_id = get_request_id(request)
    direction = sync.direction
    chunks = PaymentExporter(payments_client).iter_csv(direction, sync.criteria)

    # Read the first page up front so a node failure is still a 502
    try:
        first = await chunks.__anext__()
    except PaymentsAPIError as e:
        logging.error(f"Payments API error during export: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=502, detail="Node payments service unavailable")

    async def body():
        yield first
        async for chunk in chunks:
            yield chunk

    return StreamingResponse(
        body(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="payments-{direction.value}.csv"'},
    )
