"""Domain-specific exceptions"""

from dataclasses import dataclass


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidFilterError(DomainException):
    """Filter criteria rejected before any request was sent"""

    pass


class PaymentsAPIError(DomainException):
    """Node payments API returned an error or is unavailable"""

    pass


class PaymentNotFoundError(PaymentsAPIError):
    """Node has no payment with the requested id"""

    pass


class PriceFeedError(DomainException):
    """BTC price could not be fetched"""

    pass


class StaleResponseDiscarded(DomainException):
    """A response arrived for a request that a newer one has superseded"""

    def __init__(self, direction: str, token: int, latest: int):
        super().__init__(f"Discarded response {token} for {direction}; latest is {latest}")
        self.direction = direction
        self.token = token
        self.latest = latest


@dataclass(frozen=True)
class FetchError:
    """Failed fetch, reported alongside an empty result instead of being raised"""

    direction: str
    message: str
