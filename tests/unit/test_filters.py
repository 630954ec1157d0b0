"""Unit tests for filter criteria validation and query translation"""

import math
from datetime import date, datetime, timezone

import pytest

from payments_dashboard.domain.exceptions import InvalidFilterError
from payments_dashboard.domain.filters import FilterModel, matches, to_query_params, validate_criteria
from payments_dashboard.domain.models import ComparisonOperator, FilterCriteria, SettlementState
from tests.conftest import make_record


def test_empty_criteria_produces_no_params():
    """Empty criteria send no filter params at all"""
    assert to_query_params(FilterCriteria()) == {}
    assert FilterCriteria().is_empty


def test_full_criteria_translates_every_dimension():
    """Every filter dimension maps to its query param"""
    criteria = FilterCriteria(
        payment_state=SettlementState.SETTLED,
        operator=ComparisonOperator.GTE,
        value=1000,
        date_from=date(2024, 1, 1),
        date_to=date(2024, 1, 31),
    )
    assert to_query_params(criteria) == {
        "state": "settled",
        "operator": "gte",
        "value": "1000",
        "from": "2024-01-01",
        "to": "2024-01-31",
    }


@pytest.mark.parametrize(
    "criteria, expected_keys",
    [
        (FilterCriteria(payment_state=SettlementState.FAILED), {"state"}),
        (FilterCriteria(operator=ComparisonOperator.LTE, value=5), {"operator", "value"}),
        (FilterCriteria(date_from=date(2024, 1, 1)), {"from"}),
        (FilterCriteria(date_to=date(2024, 1, 1)), {"to"}),
    ],
)
def test_unset_dimensions_are_omitted(criteria, expected_keys):
    """Only the dimensions that are set reach the query"""
    assert set(to_query_params(criteria)) == expected_keys


def test_fractional_threshold_kept():
    """Non-integral thresholds are sent as given"""
    params = to_query_params(FilterCriteria(operator=ComparisonOperator.EQ, value=12.5))
    assert params["value"] == "12.5"


@pytest.mark.parametrize(
    "criteria",
    [
        FilterCriteria(operator=ComparisonOperator.GTE),
        FilterCriteria(value=100),
        FilterCriteria(operator=ComparisonOperator.GTE, value=-1),
        FilterCriteria(operator=ComparisonOperator.GTE, value=math.inf),
        FilterCriteria(operator=ComparisonOperator.GTE, value=math.nan),
        FilterCriteria(date_from=date(2024, 2, 1), date_to=date(2024, 1, 1)),
    ],
)
def test_invalid_criteria_rejected(criteria):
    """Inconsistent criteria raise InvalidFilterError"""
    with pytest.raises(InvalidFilterError):
        validate_criteria(criteria)


def test_single_day_range_is_valid():
    """A range starting and ending on the same day is accepted"""
    validate_criteria(FilterCriteria(date_from=date(2024, 1, 1), date_to=date(2024, 1, 1)))


def test_apply_replaces_whole_criteria():
    """Applying criteria replaces every field at once"""
    model = FilterModel()
    model.apply(FilterCriteria(payment_state=SettlementState.SETTLED, operator=ComparisonOperator.GTE, value=10))
    model.apply(FilterCriteria(date_from=date(2024, 1, 1)))

    # No field of the first criteria survives
    assert model.criteria == FilterCriteria(date_from=date(2024, 1, 1))


def test_apply_rejection_keeps_previous_criteria():
    """A rejected filter leaves the previous one active"""
    active = FilterCriteria(payment_state=SettlementState.PENDING)
    model = FilterModel(active)

    with pytest.raises(InvalidFilterError):
        model.apply(FilterCriteria(date_from=date(2024, 3, 1), date_to=date(2024, 2, 1)))

    assert model.criteria == active


def test_clear_removes_all_constraints():
    """Clearing leaves no constraint on any dimension"""
    model = FilterModel(FilterCriteria(payment_state=SettlementState.PENDING))
    model.clear()
    assert model.criteria.is_empty


def test_matches_every_dimension():
    """The local predicate checks state, threshold and day range"""
    record = make_record(
        "p1",
        state=SettlementState.SETTLED,
        amount_sat=1000,
        created_at=datetime(2024, 1, 31, 23, 59, tzinfo=timezone.utc),
    )
    january = dict(date_from=date(2024, 1, 1), date_to=date(2024, 1, 31))

    assert matches(record, FilterCriteria())
    assert matches(record, FilterCriteria(payment_state=SettlementState.SETTLED, operator=ComparisonOperator.GTE, value=1000, **january))
    assert matches(record, FilterCriteria(operator=ComparisonOperator.EQ, value=1000))
    assert not matches(record, FilterCriteria(operator=ComparisonOperator.LTE, value=999))
    assert not matches(record, FilterCriteria(payment_state=SettlementState.FAILED))
    assert not matches(record, FilterCriteria(date_to=date(2024, 1, 30)))
    assert not matches(record, FilterCriteria(date_from=date(2024, 2, 1)))
