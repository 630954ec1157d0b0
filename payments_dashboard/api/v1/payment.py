"""GET /v1/payments/{payment_id} - Fetch payment details"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from payments_dashboard.api.dependencies import get_payments_client, get_price_client, get_request_id
from payments_dashboard.api.v1.schemas import PaymentDetailResponse, PaymentSchema
from payments_dashboard.domain.exceptions import PaymentNotFoundError, PaymentsAPIError, PriceFeedError
from payments_dashboard.infrastructure.clients.payments import PaymentsClient
from payments_dashboard.infrastructure.clients.price import PriceClient

router = APIRouter()


@router.get("/payments/{payment_id}", response_model=PaymentDetailResponse)
async def get_payment(
    payment_id: str,
    request: Request,
    payments_client: PaymentsClient = Depends(get_payments_client),
    price_client: PriceClient = Depends(get_price_client),
):
    """
    Retrieve a single payment with its USD value.

    The node's own amount_usd wins when present; otherwise the amount is
    converted at the current BTC price. amount_usd is null when neither is
    available.
    """
    request_id = get_request_id(request)

    try:
        record, wire = await payments_client.get_payment(payment_id)
    except PaymentNotFoundError:
        raise HTTPException(status_code=404, detail="Payment not found")
    except PaymentsAPIError as e:
        logging.error(f"Payments API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=502, detail="Node payments service unavailable")

    amount_usd = wire.amount_usd
    if amount_usd is None:
        try:
            amount_usd = await price_client.sats_to_usd(record.amount_sat)
        except PriceFeedError as e:
            logging.warning(f"Price feed unavailable: {e}", extra={"request_id": request_id})

    return PaymentDetailResponse(
        **PaymentSchema.from_record(record).model_dump(),
        amount_usd=amount_usd,
    )
