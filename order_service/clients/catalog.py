"""HTTP client for the catalog service.

Only one call is needed: fetch an item by id so its name and price can be
snapshotted onto an order line. A 404 from the catalog is reported as
``CatalogItemNotFound``; every other failure becomes ``DependencyFailure``.
There are no retries.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

import httpx
import structlog
from pydantic import BaseModel

from order_service.core.config import Settings
from order_service.core.errors import CatalogItemNotFound, DependencyFailure

logger = structlog.get_logger(__name__)

CENTS = Decimal("0.01")


class CatalogItem(BaseModel):
    id: int
    name: str
    price: Decimal


class CatalogClient:
    def __init__(self, base_url: str, item_path: str = "/api/games/{item_id}", timeout: float = 5.0,
                 transport: Optional[httpx.BaseTransport] = None):
        self.item_path = item_path
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.BaseTransport] = None) -> "CatalogClient":
        return cls(settings.CATALOG_BASE, settings.CATALOG_ITEM_PATH, settings.CATALOG_TIMEOUT, transport=transport)

    def close(self):
        self._http.close()

    def get_item(self, item_id: int) -> CatalogItem:
        url = self.item_path.format(item_id=item_id)
        try:
            resp = self._http.get(url)
        except httpx.TimeoutException as exc:
            raise DependencyFailure(f"Catalog timed out fetching item {item_id}") from exc
        except httpx.RequestError as exc:
            raise DependencyFailure("Catalog unavailable") from exc

        if resp.status_code == 404:
            logger.info("Catalog item not found", item_id=item_id)
            raise CatalogItemNotFound(item_id)
        if resp.status_code != 200:
            raise DependencyFailure(f"Catalog returned {resp.status_code} for item {item_id}")

        try:
            data = resp.json()
            name = data["name"]
            price = Decimal(str(data["price"]))
        except (ValueError, TypeError, KeyError, InvalidOperation) as exc:
            raise DependencyFailure(f"Malformed catalog response for item {item_id}") from exc
        if not isinstance(name, str) or not price.is_finite() or price < 0:
            raise DependencyFailure(f"Malformed catalog response for item {item_id}")

        # orders store NUMERIC(10, 2); line totals and the order total use the stored value
        return CatalogItem(id=item_id, name=name, price=price.quantize(CENTS, rounding=ROUND_HALF_UP))
