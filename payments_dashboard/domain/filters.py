"""Filter model for the payments view"""

import logging
import math
import operator
from typing import Dict

from payments_dashboard.domain.exceptions import InvalidFilterError
from payments_dashboard.domain.models import ComparisonOperator, FilterCriteria, PaymentRecord
from payments_dashboard.utils.date_utils import in_day_range

logger = logging.getLogger(__name__)

_COMPARATORS = {
    ComparisonOperator.GTE: operator.ge,
    ComparisonOperator.LTE: operator.le,
    ComparisonOperator.EQ: operator.eq,
}


def validate_criteria(criteria: FilterCriteria) -> None:
    """
    Check a criteria object before it becomes active.

    Raises:
        InvalidFilterError: On an incomplete numeric comparison, a negative or
            non-finite threshold, or a date range that ends before it starts
    """
    if criteria.operator is not None and criteria.value is None:
        raise InvalidFilterError(f"Operator '{criteria.operator.value}' requires a value")
    if criteria.value is not None:
        if criteria.operator is None:
            raise InvalidFilterError("Value given without a comparison operator")
        if not math.isfinite(criteria.value) or criteria.value < 0:
            raise InvalidFilterError(f"Threshold must be a finite, non-negative amount, got {criteria.value}")
    if criteria.date_from and criteria.date_to and criteria.date_from > criteria.date_to:
        raise InvalidFilterError(
            f"Date range start {criteria.date_from.isoformat()} is after end {criteria.date_to.isoformat()}"
        )


def to_query_params(criteria: FilterCriteria) -> Dict[str, str]:
    """Translate criteria into query parameters, leaving out unset dimensions"""
    params: Dict[str, str] = {}
    if criteria.payment_state is not None:
        params["state"] = criteria.payment_state.value
    if criteria.operator is not None and criteria.value is not None:
        params["operator"] = criteria.operator.value
        # Amounts are whole sats; keep "1000" rather than "1000.0"
        value = criteria.value
        params["value"] = str(int(value)) if float(value).is_integer() else str(value)
    if criteria.date_from is not None:
        params["from"] = criteria.date_from.isoformat()
    if criteria.date_to is not None:
        params["to"] = criteria.date_to.isoformat()
    return params


def matches(record: PaymentRecord, criteria: FilterCriteria) -> bool:
    """Whether a payment satisfies every set dimension of the criteria"""
    if criteria.payment_state is not None and record.state is not criteria.payment_state:
        return False
    if criteria.operator is not None and criteria.value is not None:
        compare = _COMPARATORS[criteria.operator]
        if not compare(record.amount_sat, criteria.value):
            return False
    return in_day_range(record.created_at, criteria.date_from, criteria.date_to)


class FilterModel:
    """Holds the active criteria; replaced only as a whole"""

    def __init__(self, criteria: FilterCriteria | None = None):
        initial = criteria or FilterCriteria()
        validate_criteria(initial)
        self._criteria = initial

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    def apply(self, criteria: FilterCriteria) -> None:
        """Validate and install new criteria; on failure the previous ones stay active"""
        try:
            validate_criteria(criteria)
        except InvalidFilterError as e:
            logger.warning("Filter rejected", extra={"reason": str(e)})
            raise
        self._criteria = criteria

    def clear(self) -> None:
        self._criteria = FilterCriteria()
