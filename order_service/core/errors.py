"""Error taxonomy for the order workflows.

Services raise these; the HTTP layer maps them onto status codes. Nothing
in here is retried.
"""

from typing import Iterable, List


class OrderServiceError(Exception):
    pass


class ValidationError(OrderServiceError):
    """Caller input is unusable. Raised before any external call or write."""


class InvalidStatus(ValidationError):
    def __init__(self, status, valid_statuses: Iterable[str]):
        self.status = status
        self.valid_statuses: List[str] = list(valid_statuses)
        super().__init__("Valid status is required")


class NotFoundError(OrderServiceError):
    pass


class CatalogItemNotFound(NotFoundError):
    def __init__(self, item_id):
        self.item_id = item_id
        super().__init__(f"Catalog item with ID {item_id} not found")


class OrderNotFound(NotFoundError):
    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__("Order not found")


class DependencyFailure(OrderServiceError):
    """The catalog or the database failed for a reason other than not-found."""
