"""Order workflows: creation, status updates, deletion and the read side.

Every write runs inside ``session_factory.begin()``, which commits when the
block exits cleanly and rolls back and closes the session on any exception.
"""

import math
from decimal import Decimal
from typing import Iterable, Optional, Union

import structlog
from sqlalchemy import case, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload, sessionmaker

from order_service.clients.catalog import CatalogClient
from order_service.core.errors import DependencyFailure, InvalidStatus, OrderNotFound, ValidationError
from order_service.db.models import VALID_STATUSES, Order, OrderItem, OrderStatus
from order_service.schemas import OrderList, OrderRead, OrderStats, Pagination
from order_service.services.pricing import LineRequest, aggregate

logger = structlog.get_logger(__name__)

CENTS = Decimal("0.01")


def create_order(session_factory: sessionmaker, catalog: CatalogClient, customer_name: Optional[str],
                 customer_email: Optional[str], items: Optional[Iterable[Union[LineRequest, dict]]]) -> OrderRead:
    """Resolve, price and persist an order with its line items.

    The required-field check runs before any catalog call or session is
    opened. Catalog lookups are sequential and the first failure aborts the
    whole order, so nothing is written unless every item resolved.
    """
    items = list(items or [])
    if not customer_name or not customer_email or not items:
        raise ValidationError("Customer name, email, and items are required")

    lines = [it if isinstance(it, LineRequest) else LineRequest.model_validate(it) for it in items]
    if any(line.catalog_item_id is None for line in lines):
        raise ValidationError("Every item needs a catalog_item_id")
    resolved = [catalog.get_item(line.catalog_item_id) for line in lines]
    priced = aggregate(lines, resolved)

    try:
        with session_factory.begin() as db:
            order = Order(
                customer_name=customer_name,
                customer_email=customer_email,
                total_price=priced.total,
                status=OrderStatus.PENDING.value,
            )
            db.add(order)
            db.flush()
            for line in priced.items:
                db.add(OrderItem(
                    order_id=order.id,
                    catalog_item_id=line.catalog_item_id,
                    item_name=line.item_name,
                    quantity=line.quantity,
                    price=line.price,
                ))
            db.flush()
            db.refresh(order)
            result = OrderRead.model_validate(order)
    except SQLAlchemyError as exc:
        raise DependencyFailure("Could not persist order") from exc

    logger.info("Order created", order_id=result.id, total_price=str(result.total_price), item_count=len(result.items))
    return result


def update_order_status(session_factory: sessionmaker, order_id: int, status: Optional[str]) -> OrderRead:
    # membership is the only rule; any status may follow any other
    if not status or status not in VALID_STATUSES:
        raise InvalidStatus(status, VALID_STATUSES)

    try:
        with session_factory.begin() as db:
            order = db.get(Order, order_id)
            if not order:
                raise OrderNotFound(order_id)
            previous = order.status
            order.status = status
            order.updated_at = func.now()
            db.flush()
            db.refresh(order)
            result = OrderRead.model_validate(order)
    except SQLAlchemyError as exc:
        raise DependencyFailure("Could not update order status") from exc

    logger.info("Order status changed", order_id=order_id, previous=previous, status=status)
    return result


def delete_order(session_factory: sessionmaker, order_id: int) -> None:
    try:
        with session_factory.begin() as db:
            # items first: order_items.order_id references orders.id
            db.execute(delete(OrderItem).where(OrderItem.order_id == order_id))
            res = db.execute(delete(Order).where(Order.id == order_id))
            if res.rowcount == 0:
                raise OrderNotFound(order_id)
    except SQLAlchemyError as exc:
        raise DependencyFailure("Could not delete order") from exc

    logger.info("Order deleted", order_id=order_id)


def get_order(session_factory: sessionmaker, order_id: int) -> OrderRead:
    with session_factory() as db:
        order = db.get(Order, order_id, options=[selectinload(Order.items)])
        if not order:
            raise OrderNotFound(order_id)
        return OrderRead.model_validate(order)


def list_orders(session_factory: sessionmaker, page: int = 1, limit: int = 10, status: Optional[str] = None) -> OrderList:
    stmt = select(Order).options(selectinload(Order.items))
    count_stmt = select(func.count()).select_from(Order)
    if status:
        stmt = stmt.where(Order.status == status)
        count_stmt = count_stmt.where(Order.status == status)
    stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc()).offset((page - 1) * limit).limit(limit)

    with session_factory() as db:
        orders = [OrderRead.model_validate(o) for o in db.execute(stmt).scalars().all()]
        total = db.execute(count_stmt).scalar_one()

    return OrderList(
        orders=orders,
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit)),
    )


def order_stats(session_factory: sessionmaker) -> OrderStats:
    per_status = [func.count(case((Order.status == s, 1))).label(f"{s}_orders") for s in VALID_STATUSES]
    stmt = select(
        func.count(Order.id).label("total_orders"),
        *per_status,
        func.coalesce(func.sum(Order.total_price), 0).label("total_revenue"),
        func.coalesce(func.avg(Order.total_price), 0).label("average_order_value"),
    )
    with session_factory() as db:
        row = db.execute(stmt).one()._asdict()

    row["total_revenue"] = Decimal(str(row["total_revenue"])).quantize(CENTS)
    row["average_order_value"] = Decimal(str(row["average_order_value"])).quantize(CENTS)
    return OrderStats(**row)
