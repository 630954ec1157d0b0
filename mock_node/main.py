from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional
import json
import os

from fastapi import FastAPI, HTTPException, Query

from payments_dashboard.domain.exceptions import InvalidFilterError
from payments_dashboard.domain.filters import matches, validate_criteria
from payments_dashboard.domain.models import ComparisonOperator, Direction, FilterCriteria, SettlementState
from payments_dashboard.domain.pagination import compute_pages
from payments_dashboard.infrastructure.clients.schemas import WirePayment

app = FastAPI(title="Stub Lightning Node", version="1.0.0")
# Support both local development and Docker
DATA_FILE = Path(os.environ.get("PAYMENTS_STUB", Path(__file__).resolve().parent / "payments.json"))


def _load() -> List[dict]:
    return json.loads(DATA_FILE.read_text())


def _envelope(data, message: str, pagination: Optional[dict] = None) -> dict:
    body = {
        "success": True,
        "data": data,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if pagination is not None:
        body["pagination"] = pagination
    return body


@app.get("/health")
def health(): return {"status": "ok"}


@app.get("/api/payments")
def list_payments(
    type: Optional[Direction] = None,
    state: Optional[SettlementState] = None,
    operator: Optional[ComparisonOperator] = None,
    value: Optional[float] = None,
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
):
    criteria = FilterCriteria(payment_state=state, operator=operator, value=value, date_from=date_from, date_to=date_to)
    try:
        validate_criteria(criteria)
    except InvalidFilterError as e:
        raise HTTPException(status_code=400, detail=str(e))

    rows = []
    for raw in _load():
        record = WirePayment.model_validate(raw).to_record()
        if type not in (None, Direction.ALL) and record.direction is not type:
            continue
        if matches(record, criteria):
            rows.append((record.created_at, raw))
    rows.sort(key=lambda r: r[0], reverse=True)

    total_pages = compute_pages(len(rows), per_page)
    start = (page - 1) * per_page
    items = [raw for _, raw in rows[start:start + per_page]]
    return _envelope(
        items,
        "Payments retrieved successfully",
        pagination={
            "current_page": page,
            "per_page": per_page,
            "total_items": len(rows),
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    )


@app.get("/api/payments/{payment_id}")
def get_payment(payment_id: str):
    for raw in _load():
        if payment_id in (raw.get("id"), raw.get("payment_hash")):
            return _envelope(raw, "Payment retrieved successfully")
    raise HTTPException(status_code=404, detail="payment not found")
