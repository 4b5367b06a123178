from typing import Generic, List, Optional, TypeVar
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from .models import OrderStatus

DataT = TypeVar("DataT")


class OrderItemBase(BaseModel):
    """Base schema for order items"""
    name: str = Field(..., min_length=1, max_length=200)
    quantity: int = Field(..., gt=0, le=2**31 - 1)
    price: float = Field(..., ge=0, description="Unit price")


class OrderItemCreate(OrderItemBase):
    """Schema for creating an order item"""
    pass


class OrderItemRead(OrderItemBase):
    """Schema for reading an order item"""
    id: int
    order_id: int

    model_config = ConfigDict(from_attributes=True)


class OrderCreate(BaseModel):
    """Schema for creating an order"""
    customer_name: str = Field(..., min_length=1, max_length=100)
    customer_address: str = Field(..., min_length=1)
    customer_phone: str = Field(..., min_length=1, max_length=50)
    customer_email: Optional[str] = None
    items: List[OrderItemCreate] = Field(..., min_length=1)
    notes: Optional[str] = None
    estimated_delivery: Optional[datetime] = None


class OrderUpdate(BaseModel):
    """Schema for updating an order.

    Omitted, null and empty values all leave the stored value unchanged,
    so an update cannot clear a field. An empty item list keeps the
    current items.
    """
    customer_name: Optional[str] = Field(None, max_length=100)
    customer_address: Optional[str] = None
    customer_phone: Optional[str] = Field(None, max_length=50)
    customer_email: Optional[str] = None
    items: Optional[List[OrderItemCreate]] = None
    notes: Optional[str] = None
    delivery_person: Optional[str] = None
    delivery_phone: Optional[str] = None
    estimated_delivery: Optional[datetime] = None


class OrderStatusUpdate(BaseModel):
    """Schema for updating order status"""
    status: OrderStatus
    message: Optional[str] = None


class Order(BaseModel):
    """Schema for reading an order"""
    id: int
    customer_name: str
    customer_address: str
    customer_phone: str
    customer_email: Optional[str] = None
    items: List[OrderItemRead]
    total_amount: float
    status: OrderStatus
    delivery_person: Optional[str] = None
    delivery_phone: Optional[str] = None
    notes: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StatusLog(BaseModel):
    status: OrderStatus
    timestamp: datetime
    message: str


class TrackingInfo(BaseModel):
    """Synthetic tracking view of an order"""
    order_id: int
    status: OrderStatus
    delivery_person: Optional[str] = None
    delivery_phone: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    updated_at: datetime
    status_history: List[StatusLog]


class OrderStats(BaseModel):
    total_orders: int
    pending_orders: int
    delivered_orders: int
    total_revenue: float


class APIResponse(BaseModel, Generic[DataT]):
    """Uniform response envelope"""
    success: bool
    message: str
    data: Optional[DataT] = None
