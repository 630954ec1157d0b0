"""Pytest fixtures for testing"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from mock_node.main import app as node_app
from payments_dashboard.api.dependencies import build_synchronizer, get_payments_client
from payments_dashboard.api.main import create_app
from payments_dashboard.domain.filters import matches
from payments_dashboard.domain.models import (
    ComparisonOperator,
    Direction,
    FilterCriteria,
    PaymentPage,
    PaymentRecord,
    SettlementState,
)
from payments_dashboard.infrastructure.clients.payments import PaymentsClient
from payments_dashboard.infrastructure.clients.price import PriceClient
from payments_dashboard.services.counts import CountAggregator
from payments_dashboard.services.fetcher import CollectionFetcher
from payments_dashboard.services.synchronizer import ViewSynchronizer

NODE_URL = "http://node.test"
BTC_PRICE = 42_000.0


def criteria_from_params(params: Dict[str, str]) -> FilterCriteria:
    """Rebuild FilterCriteria from query parameters, as a node would"""
    return FilterCriteria(
        payment_state=SettlementState(params["state"]) if "state" in params else None,
        operator=ComparisonOperator(params["operator"]) if "operator" in params else None,
        value=float(params["value"]) if "value" in params else None,
        date_from=datetime.fromisoformat(params["from"]).date() if "from" in params else None,
        date_to=datetime.fromisoformat(params["to"]).date() if "to" in params else None,
    )


def serve_records(records: List[PaymentRecord]) -> Callable[[Dict[str, str]], PaymentPage]:
    """Handler answering list_payments calls from an in-memory payment list"""

    def handler(params: Dict[str, str]) -> PaymentPage:
        direction = Direction(params.get("type", "all"))
        criteria = criteria_from_params(params)
        hits = [
            r for r in records
            if (direction is Direction.ALL or r.direction is direction) and matches(r, criteria)
        ]
        page = int(params.get("page", "1"))
        per_page = int(params.get("per_page", "10"))
        start = (page - 1) * per_page
        return PaymentPage(records=tuple(hits[start:start + per_page]), total_items=len(hits))

    return handler


class ScriptedPaymentsClient:
    """
    Stands in for PaymentsClient in service tests.

    Calls are answered by a handler returning a PaymentPage or an exception to
    raise. hold(...) parks matching calls until the returned event is set, so
    tests decide in which order responses arrive.
    """

    def __init__(self, handler: Callable[[Dict[str, str]], object]):
        self.handler = handler
        self.calls: List[Dict[str, str]] = []
        self._holds: List[Tuple[Dict[str, str], asyncio.Event]] = []

    def hold(self, **params: str) -> asyncio.Event:
        event = asyncio.Event()
        self._holds.append((params, event))
        return event

    async def list_payments(self, params: Dict[str, str]) -> PaymentPage:
        self.calls.append(dict(params))
        for wanted, event in list(self._holds):
            if all(params.get(k) == v for k, v in wanted.items()):
                self._holds.remove((wanted, event))
                await event.wait()
                break
        result = self.handler(params)
        if isinstance(result, BaseException):
            raise result
        return result


async def settle(predicate: Callable[[], bool], rounds: int = 200) -> None:
    """Yield to the event loop until predicate holds"""
    for _ in range(rounds):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


def make_record(
    payment_id: str,
    direction: Direction = Direction.OUTGOING,
    state: SettlementState = SettlementState.SETTLED,
    amount_sat: int = 1000,
    created_at: datetime | None = None,
    **kwargs,
) -> PaymentRecord:
    return PaymentRecord(
        payment_id=payment_id,
        direction=direction,
        state=state,
        amount_sat=amount_sat,
        created_at=created_at or datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc),
        **kwargs,
    )


@pytest.fixture
def sample_records() -> List[PaymentRecord]:
    """25 outgoing, 10 incoming and 5 forwarded payments across January 2024"""
    base = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
    records = []
    for i in range(25):
        records.append(make_record(f"out-{i}", Direction.OUTGOING, amount_sat=500 * (i + 1), created_at=base + timedelta(days=i)))
    for i in range(10):
        state = SettlementState.PENDING if i % 3 == 0 else SettlementState.SETTLED
        records.append(make_record(f"in-{i}", Direction.INCOMING, state=state, amount_sat=2000, created_at=base + timedelta(days=i)))
    for i in range(5):
        records.append(make_record(f"fwd-{i}", Direction.FORWARDED, amount_sat=300, created_at=base + timedelta(days=i)))
    return records


@pytest.fixture
def scripted_client(sample_records: List[PaymentRecord]) -> ScriptedPaymentsClient:
    return ScriptedPaymentsClient(serve_records(sample_records))


@pytest.fixture
def synchronizer(scripted_client: ScriptedPaymentsClient) -> ViewSynchronizer:
    return ViewSynchronizer(
        CollectionFetcher(scripted_client),
        CountAggregator(scripted_client),
        page_size=10,
        max_visible_pages=5,
    )


@pytest.fixture
def node_transport() -> httpx.ASGITransport:
    """Routes PaymentsClient requests into the stub node app in-process"""
    return httpx.ASGITransport(app=node_app)


@pytest.fixture
def node_client(node_transport: httpx.ASGITransport) -> PaymentsClient:
    return PaymentsClient(base_url=NODE_URL, transport=node_transport)


@pytest.fixture
def price_client() -> PriceClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"USD": BTC_PRICE, "EUR": 39_000.0})

    return PriceClient(url="http://price.test/prices", transport=httpx.MockTransport(handler))


@pytest.fixture
def client(node_client: PaymentsClient, price_client: PriceClient) -> TestClient:
    """FastAPI test client wired to the stub node"""
    app = create_app(synchronizer=build_synchronizer(node_client), price_client=price_client)
    app.dependency_overrides[get_payments_client] = lambda: node_client
    return TestClient(app)
