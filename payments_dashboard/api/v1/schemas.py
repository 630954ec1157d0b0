"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from payments_dashboard.domain.models import (
    ComparisonOperator,
    Direction,
    FilterCriteria,
    PaymentRecord,
    SettlementState,
    ViewStatus,
)
from payments_dashboard.services.synchronizer import ViewSnapshot


class FilterRequest(BaseModel):
    """Request body for POST /v1/payments/view/filter; omitted fields are unconstrained"""

    payment_state: Optional[SettlementState] = None
    operator: Optional[ComparisonOperator] = None
    value: Optional[float] = None
    date_from: Optional[date] = Field(None, alias="from")
    date_to: Optional[date] = Field(None, alias="to")

    model_config = {"populate_by_name": True}

    def to_criteria(self) -> FilterCriteria:
        return FilterCriteria(
            payment_state=self.payment_state,
            operator=self.operator,
            value=self.value,
            date_from=self.date_from,
            date_to=self.date_to,
        )


class DirectionRequest(BaseModel):
    """Request body for POST /v1/payments/view/direction"""

    direction: Direction


class PageRequest(BaseModel):
    """Request body for POST /v1/payments/view/page"""

    page: int = Field(..., description="Requested page; clamped into range")


class PaymentSchema(BaseModel):
    """Single payment row"""

    payment_id: str
    direction: Direction
    state: SettlementState
    amount_sat: int
    created_at: datetime
    routing_fee_sat: Optional[int] = None
    description: Optional[str] = None

    @classmethod
    def from_record(cls, record: PaymentRecord) -> "PaymentSchema":
        return cls(
            payment_id=record.payment_id,
            direction=record.direction,
            state=record.state,
            amount_sat=record.amount_sat,
            created_at=record.created_at,
            routing_fee_sat=record.routing_fee_sat,
            description=record.description,
        )


class PaginationSchema(BaseModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int
    page_numbers: List[int]
    has_next: bool
    has_prev: bool


class CountsSchema(BaseModel):
    """Global badge counts; errors lists categories that fell back to 0"""

    all: int
    incoming: int
    outgoing: int
    errors: List[Direction] = []


class ErrorSchema(BaseModel):
    direction: str
    message: str


class FilterSchema(BaseModel):
    payment_state: Optional[SettlementState] = None
    operator: Optional[ComparisonOperator] = None
    value: Optional[float] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class ViewResponse(BaseModel):
    """Response for the /v1/payments/view endpoints"""

    status: ViewStatus
    direction: Direction
    filter: FilterSchema
    records: List[PaymentSchema]
    pagination: PaginationSchema
    counts: CountsSchema
    error: Optional[ErrorSchema] = None

    @classmethod
    def from_snapshot(cls, snapshot: ViewSnapshot) -> "ViewResponse":
        p = snapshot.pagination
        c = snapshot.counts
        f = snapshot.criteria
        return cls(
            status=snapshot.status,
            direction=snapshot.direction,
            filter=FilterSchema(
                payment_state=f.payment_state,
                operator=f.operator,
                value=f.value,
                date_from=f.date_from,
                date_to=f.date_to,
            ),
            records=[PaymentSchema.from_record(r) for r in snapshot.records],
            pagination=PaginationSchema(
                page=p.page,
                page_size=p.page_size,
                total_items=p.total_items,
                total_pages=p.total_pages,
                page_numbers=list(p.page_numbers),
                has_next=p.has_next,
                has_prev=p.has_prev,
            ),
            counts=CountsSchema(
                all=c.all,
                incoming=c.incoming,
                outgoing=c.outgoing,
                errors=sorted(c.errors, key=lambda d: d.value),
            ),
            error=ErrorSchema(direction=snapshot.error.direction, message=snapshot.error.message)
            if snapshot.error
            else None,
        )


class PaymentDetailResponse(PaymentSchema):
    """Response for GET /v1/payments/{payment_id}"""

    amount_usd: Optional[float] = None
