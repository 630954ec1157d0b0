"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from payments_dashboard.infrastructure.clients.payments import PaymentsClient
from payments_dashboard.infrastructure.clients.price import PriceClient
from payments_dashboard.services.counts import CountAggregator
from payments_dashboard.services.fetcher import CollectionFetcher
from payments_dashboard.services.synchronizer import ViewSynchronizer


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_payments_client() -> PaymentsClient:
    """Provide node payments API client instance"""
    return PaymentsClient()


def build_synchronizer(client: PaymentsClient | None = None) -> ViewSynchronizer:
    """Wire fetcher and aggregator around one payments client"""
    client = client or PaymentsClient()
    return ViewSynchronizer(CollectionFetcher(client), CountAggregator(client))


def get_synchronizer(request: Request) -> ViewSynchronizer:
    """The application-wide payments view; every request sees the same one"""
    return request.app.state.synchronizer


def get_price_client(request: Request) -> PriceClient:
    """Shared so the price cache survives between requests"""
    return request.app.state.price_client
