from typing import List

from . import schemas
from .models import OrderStatus

STATUS_MESSAGES = {
    OrderStatus.PENDING: "Order placed",
    OrderStatus.CONFIRMED: "Order confirmed by restaurant",
    OrderStatus.PREPARING: "Order is being prepared",
    OrderStatus.OUT_FOR_DELIVERY: "Order is out for delivery",
    OrderStatus.DELIVERED: "Order delivered successfully",
    OrderStatus.CANCELLED: "Order cancelled",
}

# Statuses that follow "pending" on the happy path
STATUS_SEQUENCE = [
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
]


def build_status_history(order) -> List[schemas.StatusLog]:
    """Reconstruct a status history from the order's current status.

    History is not stored; the "pending" entry is stamped with the creation
    time and every later step up to the current status with the last
    modification time. Statuses off the sequence (e.g. cancelled) only get
    the "pending" entry.
    """
    history = [
        schemas.StatusLog(
            status=OrderStatus.PENDING,
            timestamp=order.created_at,
            message=STATUS_MESSAGES[OrderStatus.PENDING],
        )
    ]

    current = OrderStatus(order.status)
    if current not in STATUS_SEQUENCE:
        return history

    for status in STATUS_SEQUENCE[: STATUS_SEQUENCE.index(current) + 1]:
        history.append(
            schemas.StatusLog(
                status=status,
                timestamp=order.updated_at,
                message=STATUS_MESSAGES[status],
            )
        )
    return history


def build_tracking_info(order) -> schemas.TrackingInfo:
    return schemas.TrackingInfo(
        order_id=order.id,
        status=order.status,
        delivery_person=order.delivery_person,
        delivery_phone=order.delivery_phone,
        estimated_delivery=order.estimated_delivery,
        updated_at=order.updated_at,
        status_history=build_status_history(order),
    )
