"""Pydantic schemas for the node payments API wire format"""

from datetime import datetime, timezone
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict

from payments_dashboard.domain.models import Direction, PaymentRecord, SettlementState

# Node implementations disagree on naming; everything is lower-cased first
_DIRECTION_ALIASES = {
    "incoming": Direction.INCOMING,
    "received": Direction.INCOMING,
    "receive": Direction.INCOMING,
    "outgoing": Direction.OUTGOING,
    "sent": Direction.OUTGOING,
    "send": Direction.OUTGOING,
    "forwarded": Direction.FORWARDED,
    "forward": Direction.FORWARDED,
}

_STATE_ALIASES = {
    "settled": SettlementState.SETTLED,
    "succeeded": SettlementState.SETTLED,
    "completed": SettlementState.SETTLED,
    "failed": SettlementState.FAILED,
    "pending": SettlementState.PENDING,
    "in_flight": SettlementState.PENDING,
    "inflight": SettlementState.PENDING,
}


class WireTimestamp(BaseModel):
    """Rust SystemTime as serialized by the node"""

    secs_since_epoch: int
    nanos_since_epoch: int = 0


class WirePayment(BaseModel):
    """Single payment as sent by the node; every field may be missing"""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    payment_hash: Optional[str] = None
    type: Optional[str] = None
    state: Optional[str] = None
    amount_sat: Optional[int] = None
    amount: Optional[float] = None
    routing_fee: Optional[int] = None
    creation_time: Union[WireTimestamp, int, float, str, None] = None
    description: Optional[str] = None
    invoice: Optional[str] = None
    amount_usd: Optional[float] = None

    def to_record(self) -> PaymentRecord:
        """
        Normalize into a PaymentRecord.

        Raises:
            ValueError: When identity, direction, state, amount or timestamp
                cannot be determined
        """
        payment_id = self.id or self.payment_hash
        if not payment_id:
            raise ValueError("payment has neither id nor payment_hash")

        direction = _DIRECTION_ALIASES.get((self.type or "").strip().lower())
        if direction is None:
            raise ValueError(f"payment {payment_id}: unknown type {self.type!r}")

        state = _STATE_ALIASES.get((self.state or "").strip().lower())
        if state is None:
            raise ValueError(f"payment {payment_id}: unknown state {self.state!r}")

        if self.amount_sat is not None:
            amount_sat = self.amount_sat
        elif self.amount is not None:
            amount_sat = int(round(self.amount))
        else:
            raise ValueError(f"payment {payment_id}: missing amount")

        return PaymentRecord(
            payment_id=payment_id,
            direction=direction,
            state=state,
            amount_sat=amount_sat,
            created_at=self._created_at(payment_id),
            routing_fee_sat=self.routing_fee,
            description=self.description or self.invoice,
        )

    def _created_at(self, payment_id: str) -> datetime:
        ts = self.creation_time
        if ts is None:
            raise ValueError(f"payment {payment_id}: missing creation_time")
        try:
            if isinstance(ts, WireTimestamp):
                return datetime.fromtimestamp(ts.secs_since_epoch + ts.nanos_since_epoch / 1e9, tz=timezone.utc)
            if isinstance(ts, (int, float)):
                return datetime.fromtimestamp(ts, tz=timezone.utc)
        except (OverflowError, OSError) as e:
            raise ValueError(f"payment {payment_id}: creation_time out of range ({e})") from e
        parsed = datetime.fromisoformat(ts.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed


class WirePagination(BaseModel):
    """Pagination metadata block of the response envelope"""

    model_config = ConfigDict(extra="ignore")

    current_page: Optional[int] = None
    per_page: Optional[int] = None
    total_items: Optional[int] = None
    total_pages: Optional[int] = None


class WireEnvelope(BaseModel):
    """Standard node API response wrapper"""

    model_config = ConfigDict(extra="ignore")

    success: Optional[bool] = None
    message: Optional[str] = None
    data: Any = None
    pagination: Optional[WirePagination] = None
    timestamp: Optional[str] = None

    def payments(self) -> List[WirePayment]:
        """Payments carried in data, whichever list shape the node used"""
        items: Any = self.data
        if items is None:
            return []
        if isinstance(items, dict):
            if "items" in items:
                items = items["items"]
            elif "payments" in items:
                items = items["payments"]
            else:
                raise ValueError("data object holds no payment list")
        if not isinstance(items, list):
            raise ValueError(f"unexpected data type {type(items).__name__}")
        return [WirePayment.model_validate(item) for item in items]

    def payment(self) -> WirePayment:
        if not isinstance(self.data, dict):
            raise ValueError("data is not a payment object")
        return WirePayment.model_validate(self.data)

    def total_items(self, returned: int) -> int:
        """Server total, falling back to data.total, then to the records returned"""
        if self.pagination is not None and self.pagination.total_items is not None:
            return max(0, self.pagination.total_items)
        if isinstance(self.data, dict) and isinstance(self.data.get("total"), int):
            return max(0, self.data["total"])
        return returned
