"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import FrozenSet, Optional, Tuple


class Direction(str, Enum):
    """Direction tab of the payments view"""

    ALL = "all"
    INCOMING = "incoming"
    OUTGOING = "outgoing"
    FORWARDED = "forwarded"


# Tabs that carry a badge count
COUNTED_DIRECTIONS: Tuple[Direction, ...] = (Direction.ALL, Direction.INCOMING, Direction.OUTGOING)


class SettlementState(str, Enum):
    SETTLED = "settled"
    FAILED = "failed"
    PENDING = "pending"


class ComparisonOperator(str, Enum):
    GTE = "gte"
    LTE = "lte"
    EQ = "eq"


class ViewStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class PaymentRecord:
    """Payment as reported by the node"""

    payment_id: str
    direction: Direction
    state: SettlementState
    amount_sat: int
    created_at: datetime
    routing_fee_sat: Optional[int] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class FilterCriteria:
    """
    Active filter predicate for the payments view.

    A field left as None places no constraint on that dimension.
    """

    payment_state: Optional[SettlementState] = None
    operator: Optional[ComparisonOperator] = None
    value: Optional[float] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @property
    def is_empty(self) -> bool:
        return all(
            v is None
            for v in (self.payment_state, self.operator, self.value, self.date_from, self.date_to)
        )


@dataclass(frozen=True)
class CategoryCounts:
    """Global badge counts; failed categories read 0 and are listed in errors"""

    all: int = 0
    incoming: int = 0
    outgoing: int = 0
    errors: FrozenSet[Direction] = field(default_factory=frozenset)

    def for_direction(self, direction: Direction) -> int:
        return getattr(self, direction.value, 0)


@dataclass(frozen=True)
class PaymentPage:
    """One page of payments plus the server-reported total"""

    records: Tuple[PaymentRecord, ...]
    total_items: int
