from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from order_service.services.pricing import LineRequest

class OrderCreate(BaseModel):
    # presence is checked by the workflow so a bad request gets a 400, not a 422
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    items: Optional[List[LineRequest]] = None

class StatusUpdate(BaseModel):
    status: Optional[str] = None

class OrderItemRead(BaseModel):
    id: int
    order_id: int
    catalog_item_id: int
    item_name: str
    quantity: int
    price: Decimal
    class Config: from_attributes = True

class OrderRead(BaseModel):
    id: int
    customer_name: str
    customer_email: str
    total_price: Decimal
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemRead] = []
    class Config: from_attributes = True

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

class OrderList(BaseModel):
    orders: List[OrderRead]
    pagination: Pagination

class OrderStats(BaseModel):
    total_orders: int
    pending_orders: int
    processing_orders: int
    shipped_orders: int
    delivered_orders: int
    cancelled_orders: int
    total_revenue: Decimal
    average_order_value: Decimal
