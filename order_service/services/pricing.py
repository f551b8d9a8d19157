"""Turn requested lines plus resolved catalog records into priced lines."""

from decimal import Decimal
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from order_service.clients.catalog import CatalogItem


class LineRequest(BaseModel):
    catalog_item_id: Optional[int] = None
    quantity: Optional[int] = Field(default=None, ge=0)


class PricedLine(BaseModel):
    catalog_item_id: Optional[int] = None
    item_name: str
    quantity: int
    price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class PricedOrder(BaseModel):
    items: List[PricedLine]
    total: Decimal


def effective_quantity(quantity: Optional[int]) -> int:
    # a missing quantity and an explicit 0 both mean one unit
    return quantity or 1


def aggregate(lines: Sequence[LineRequest], resolved: Sequence[CatalogItem]) -> PricedOrder:
    if len(lines) != len(resolved):
        raise ValueError("every requested line needs exactly one resolved catalog item")

    items = []
    total = Decimal("0")
    for line, item in zip(lines, resolved):
        priced = PricedLine(
            catalog_item_id=item.id,
            item_name=item.name,
            quantity=effective_quantity(line.quantity),
            price=item.price,
        )
        total += priced.line_total
        items.append(priced)
    return PricedOrder(items=items, total=total)
