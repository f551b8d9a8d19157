from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from sqlalchemy.orm import sessionmaker
import structlog

from order_service.api.deps import get_catalog, get_session_factory
from order_service.clients.catalog import CatalogClient
from order_service.core.errors import (
    CatalogItemNotFound,
    DependencyFailure,
    InvalidStatus,
    OrderNotFound,
    ValidationError,
)
from order_service.schemas import OrderCreate, OrderList, OrderRead, OrderStats, StatusUpdate
from order_service.services import orders

router = APIRouter()
logger = structlog.get_logger(__name__)

INTERNAL_ERROR = "Internal server error"

@router.get("/v1/orders", response_model=OrderList)
def list_orders(page: int = Query(default=1, ge=1), limit: int = Query(default=10, ge=1, le=100),
                status: Optional[str] = None, session_factory: sessionmaker = Depends(get_session_factory)):
    return orders.list_orders(session_factory, page=page, limit=limit, status=status)

@router.get("/v1/orders/stats/summary", response_model=OrderStats)
def order_stats(session_factory: sessionmaker = Depends(get_session_factory)):
    return orders.order_stats(session_factory)

@router.get("/v1/orders/{order_id}", response_model=OrderRead)
def get_order(order_id: int, session_factory: sessionmaker = Depends(get_session_factory)):
    try:
        return orders.get_order(session_factory, order_id)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found")

@router.post("/v1/orders", response_model=OrderRead, status_code=201)
def create_order(payload: OrderCreate, session_factory: sessionmaker = Depends(get_session_factory),
                 catalog: CatalogClient = Depends(get_catalog)):
    try:
        return orders.create_order(
            session_factory,
            catalog,
            customer_name=payload.customer_name,
            customer_email=payload.customer_email,
            items=payload.items,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except CatalogItemNotFound as exc:
        # a missing catalog item is bad client input, not a missing order
        raise HTTPException(status_code=400, detail=str(exc))
    except DependencyFailure:
        logger.exception("Error creating order")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)

@router.put("/v1/orders/{order_id}/status", response_model=OrderRead)
def update_order_status(order_id: int, payload: StatusUpdate,
                        session_factory: sessionmaker = Depends(get_session_factory)):
    try:
        return orders.update_order_status(session_factory, order_id, payload.status)
    except InvalidStatus as exc:
        raise HTTPException(status_code=400, detail={"error": str(exc), "valid_statuses": exc.valid_statuses})
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found")
    except DependencyFailure:
        logger.exception("Error updating order status", order_id=order_id)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)

@router.delete("/v1/orders/{order_id}")
def delete_order(order_id: int, session_factory: sessionmaker = Depends(get_session_factory)):
    try:
        orders.delete_order(session_factory, order_id)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found")
    except DependencyFailure:
        logger.exception("Error deleting order", order_id=order_id)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)
    return {"message": "Order deleted successfully"}
